from foodcity.db.base_class import Base


# IMPORT ALL MODELS HERE (THIS REGISTERS THEM WITH Base.metadata)
from foodcity.models.user import User
from foodcity.models.address import Address
from foodcity.models.product import Product
from foodcity.models.addon import AddOn
from foodcity.models.coupon import Coupon
from foodcity.models.cart import CartSnapshot
from foodcity.models.order import Order, OrderItem, OrderAddon
from foodcity.models.order_status_history import OrderStatusHistory
from foodcity.models.payment import Payment
from foodcity.models.employee import Employee
from foodcity.models.company import CompanySettings
from foodcity.models.job_application import JobApplication
