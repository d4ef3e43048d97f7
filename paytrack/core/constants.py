MONTHS_PER_YEAR = 12

MIN_YEAR = 1970
MAX_YEAR = 9999

MONTH_NAMES = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]
