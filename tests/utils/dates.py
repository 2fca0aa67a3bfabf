"""Fixed dates used across the test suite."""
from datetime import date, datetime

# Tuesday; MONDAY is the following week
NOW = datetime(2030, 1, 1, 8, 0)
MONDAY = date(2030, 1, 7)
SUNDAY = date(2030, 1, 6)
SATURDAY = date(2030, 1, 12)
