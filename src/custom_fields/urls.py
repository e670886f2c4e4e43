SYNC_CUSTOM_FIELDS_URL = "/api/v1/events/{event_id}/custom-fields"
GET_RESULTS_URL = "/api/v1/events/{event_id}/custom-fields/results"
GET_PUBLIC_RESULTS_URL = "/api/v1/events/public/{slug}/custom-fields"

RSVP_CUSTOM_FIELDS_URL = "/api/v1/rsvp/{token}/custom-fields"
