from domain.count_record import Submitter
from domain.denominations import DenominationCount
from domain.drawer import DrawerId

FRONT_DRAWER = DrawerId("front-counter")
BACK_DRAWER = DrawerId("back-office")

FRONT_TARGET = DenominationCount(quarters=40, ones=50, fives=10, tens=5)

CASHIER = Submitter(user_id="cashier@example.com", user_name="Casey Cashier")
MANAGER = Submitter(user_id="manager@example.com", user_name="Morgan Manager")

# 300.00 in the till
OPENING_300 = DenominationCount(hundreds=3)
# 345.50 in the till
CLOSING_345_50 = DenominationCount(hundreds=3, twenties=2, fives=1, quarters=2)
# 340.00 in the till
CLOSING_340 = DenominationCount(hundreds=3, twenties=2)
