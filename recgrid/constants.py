# Kinds of values that a record field can hold.
VALUE_KIND_STRING = "string"
VALUE_KIND_INTEGER = "integer"
VALUE_KIND_FLOAT = "float"
VALUE_KIND_BOOL = "bool"
VALUE_KIND_ENUM = "enum"
VALUE_KIND_REFERENCE = "object-reference"
VALUE_KIND_LIST = "list"
VALUE_KIND_COMPOSITE = "composite"
VALUE_KIND_OTHER = "other"

# Hints that select the widget used for a field.
WIDGET_HINT_SINGLE_LINE = "single-line"
WIDGET_HINT_LONG_TEXT = "long-text"

# The field that the store uses to remember the class of a record.
SCRIPT_FIELD = "record_type"

# Keys of the columns that do not map to a record field.
COLUMN_KEY_ACTIONS = "__actions__"
COLUMN_KEY_IDENTITY = "__identity__"
COLUMN_KEY_NAME = "__name__"

# Extension of the files written by the directory store.
RECORD_FILE_EXT = ".yaml"
