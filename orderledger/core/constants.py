ORDER_STATUS_PENDING = "pending"
ORDER_STATUS_CONFIRMED = "confirmed"
ORDER_STATUS_CANCELLED = "cancelled"
ORDER_STATUSES = (ORDER_STATUS_PENDING, ORDER_STATUS_CONFIRMED, ORDER_STATUS_CANCELLED)

# Row name in order_number_sequences backing order numbers.
ORDER_NUMBER_SEQUENCE = "orders"

# SQLite integers are signed 64-bit; larger values overflow the driver.
MAX_ROW_ID = 2**63 - 1
# Largest quantity accepted on one order line or one stock adjustment.
MAX_QUANTITY = 2**31 - 1
