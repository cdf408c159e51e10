from pydantic import BaseModel, Field


class PaymentOrderCreate(BaseModel):
    order_number: str = Field(..., min_length=1, max_length=50)


class PaymentVerify(BaseModel):
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str
