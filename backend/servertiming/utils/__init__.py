from .server_timing import PrefixMode, ServerTimer, TimingEntry, quote
from .errors import error_response
