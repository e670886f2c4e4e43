MAX_CUSTOM_FIELDS_PER_EVENT = 10
MIN_OPTIONS_PER_FIELD = 2
MAX_OPTIONS_PER_FIELD = 20
MAX_LABEL_LENGTH = 200
MAX_TEXT_RESPONSE_LENGTH = 1000

DEFAULT_MAX_CLAIMS_PER_ITEM = 1

# separator used when a multi-select answer is stored as a single string
OPTION_SEPARATOR = ", "

# downstream callers look for this phrase to localize capacity errors
FULLY_CLAIMED = "fully claimed"
