# Directives
CUE_FILE = "FILE"
CUE_TRACK = "TRACK"
CUE_INDEX = "INDEX"

# Artificial gap requests and metadata, none of which affect byte extraction
IGNORED_DIRECTIVES = (
    "PREGAP", "POSTGAP", "CDTEXTFILE", "SONGWRITER", "PERFORMER",
    "CATALOG", "FLAGS", "TITLE", "ISRC", "REM",
)

AUDIO_SUBCHANNEL_PREFIX = "AUDIO/"

# Regular expressions
REGEX_FILE = r'^' + CUE_FILE + r'\s+(?P<rest>.*)$'
REGEX_TRACK = r'^' + CUE_TRACK + r'(\s+(?P<number>\d+)(\s+(?P<mode>\S+))?)?(\s.*)?$'
REGEX_INDEX = r'^' + CUE_INDEX + r'(\s+(?P<index>\d+)(\s+(?P<address>\S+))?)?(\s.*)?$'
REGEX_IGNORED = r'^(?P<directive>' + '|'.join(IGNORED_DIRECTIVES) + r')(\s.*)?$'
REGEX_AUDIO_SUBCHANNEL = r'^' + AUDIO_SUBCHANNEL_PREFIX + r'(?P<size>\d+)$'
