from enum import Enum


class TableNames(str, Enum):
    EVENTS = "events"
    GUESTS = "guests"
    CUSTOM_FIELDS = "event_custom_fields"
    CUSTOM_FIELD_RESPONSES = "custom_field_responses"
    SIGNUP_CLAIMS = "signup_claims"
