from foodcity.models.user import User, UserRole
from foodcity.models.address import Address
from foodcity.models.product import Product, FoodCategory
from foodcity.models.addon import AddOn
from foodcity.models.coupon import Coupon, DiscountType
from foodcity.models.cart import CartSnapshot
from foodcity.models.order import Order, OrderItem, OrderAddon, OrderStatus, OrderPaymentStatus, OrderPaymentMethod
from foodcity.models.payment import Payment, PaymentStatus, PaymentMethod
from foodcity.models.order_status_history import OrderStatusHistory
from foodcity.models.employee import Employee
from foodcity.models.company import CompanySettings
from foodcity.models.job_application import JobApplication, JobPosition, ExperienceRange, NoticePeriod, ApplicationStatus
