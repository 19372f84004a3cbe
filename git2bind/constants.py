from . import native_adaptation

GIT_CONFIG_LEVEL_PROGRAMDATA = native_adaptation.git_config_level_t.PROGRAMDATA
GIT_CONFIG_LEVEL_SYSTEM = native_adaptation.git_config_level_t.SYSTEM
GIT_CONFIG_LEVEL_XDG = native_adaptation.git_config_level_t.XDG
GIT_CONFIG_LEVEL_GLOBAL = native_adaptation.git_config_level_t.GLOBAL

SEARCH_PATH_LEVELS = (
    GIT_CONFIG_LEVEL_SYSTEM,
    GIT_CONFIG_LEVEL_GLOBAL,
    GIT_CONFIG_LEVEL_XDG,
    GIT_CONFIG_LEVEL_PROGRAMDATA,
)

GIT_DIRECTION_FETCH = native_adaptation.git_direction.FETCH
GIT_DIRECTION_PUSH = native_adaptation.git_direction.PUSH

GIT_INDEXER_OPTIONS_VERSION = 1

GIT_OID_RAWSZ = GIT_OID_SHA1_SIZE = 20
GIT_OID_HEXSZ = GIT_OID_SHA1_HEXSIZE = GIT_OID_SHA1_SIZE * 2

GIT_PROXY_OPTIONS_VERSION = 1

GIT_REMOTE_CALLBACKS_VERSION = 1

GIT_REPOSITORY_OPEN_NO_SEARCH = 1 << 0

# Placeholder for the existing search path when setting a new one.
GIT_SEARCH_PATH_PLACEHOLDER = "$PATH"
