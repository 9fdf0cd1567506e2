# Event & error codes
INVALID_JSON_BODY = 'INVALID_JSON_BODY'
MISSING_URLS = 'MISSING_URLS'
TOO_MANY_URLS = 'TOO_MANY_URLS'
INVALID_URL_ITEM = 'INVALID_URL_ITEM'
STORAGE_FAILURE = 'STORAGE_FAILURE'
