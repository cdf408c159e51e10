from html import escape

from foodcity.core.config import settings


def _line_rows(lines, name_attr):
    rows = ""
    for line in lines:
        label = escape(getattr(line, name_attr))
        if line.selected_customization:
            label += f" ({escape(line.selected_customization.get('option', ''))})"
        rows += f"""
        <tr>
            <td>{label}</td>
            <td>{line.quantity}</td>
            <td>₹{line.price:,.2f}</td>
            <td>₹{line.price * line.quantity:,.2f}</td>
        </tr>
        """
    return rows


def order_confirmation_template(order):
    """HTML email template for order confirmation"""
    rows_html = _line_rows(order.items, "title") + _line_rows(order.addons, "name")
    payment_label = "Cash on delivery" if order.payment_method.value == "cod" else "Paid online"

    discount_row = ""
    if order.discount:
        coupon = f" ({escape(order.coupon_code)})" if order.coupon_code else ""
        discount_row = f"""
                <tr>
                    <td>Discount{coupon}:</td>
                    <td>-₹{order.discount:,.2f}</td>
                </tr>"""

    html = f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>
            body {{ font-family: Arial, sans-serif; line-height: 1.6; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
            .header {{ background: #D35400; color: white; padding: 20px; text-align: center; }}
            table {{ width: 100%; border-collapse: collapse; margin: 20px 0; }}
            th, td {{ padding: 10px; text-align: left; border-bottom: 1px solid #ddd; }}
            .total {{ font-size: 18px; font-weight: bold; }}
        </style>
    </head>
    <body>
        <div class="container">
            <div class="header">
                <h1>FoodCity</h1>
                <p>Order Confirmation</p>
            </div>

            <p>Dear {escape(order.customer_name)},</p>
            <p>Your order <strong>#{order.order_number}</strong> has been placed and the kitchen has it.</p>

            <table>
                <thead>
                    <tr>
                        <th>Item</th>
                        <th>Qty</th>
                        <th>Price</th>
                        <th>Total</th>
                    </tr>
                </thead>
                <tbody>
                    {rows_html}
                </tbody>
            </table>

            <table>
                <tr>
                    <td>Subtotal:</td>
                    <td>₹{order.subtotal:,.2f}</td>
                </tr>
                <tr>
                    <td>Tax:</td>
                    <td>₹{order.tax:,.2f}</td>
                </tr>
                <tr>
                    <td>Delivery:</td>
                    <td>₹{order.delivery_charge:,.2f}</td>
                </tr>{discount_row}
                <tr class="total">
                    <td>Total:</td>
                    <td>₹{order.total_amount:,.2f}</td>
                </tr>
            </table>

            <p>Payment: {payment_label}</p>
            <p>Delivering to: {escape(order.customer_address)} - {escape(order.customer_pincode)}</p>
            <p><a href="{settings.FRONTEND_URL}/orders/{order.order_number}">Track your order</a></p>
        </div>
    </body>
    </html>
    """
    return html
