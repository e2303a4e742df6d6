class Placement:
    """
    Where a new entry goes relative to a reference entry
    """
    ABOVE = 'above'
    BELOW = 'below'
    BOTTOM = 'bottom'

# document
ENTRIES_FIELD = 'entries'
JSON_EXTENSION = '.json'

# file names
DEFAULT_FILE_NAME = 'lorebook.json'
EXPORT_FILE_PREFIX = 'edited_'
EXPORT_MIMETYPE = 'application/json'

# upload form
UPLOAD_FIELD = 'lorebookFile'

# toastr options for messages the user must dismiss
STICKY_TOASTR_OPTIONS = {'timeOut': 0, 'extendedTimeOut': 0, 'closeButton': True}
