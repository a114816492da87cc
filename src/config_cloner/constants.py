class Constants:
    API_TOKEN_KEY = "api_token"
    DOUBLE_COLON = "::"
    LIBRARY_NAME_KEY = "library_name"
    PACKAGE_NAME_KEY = "package_name"
    PACKAGE_VERSION_KEY = "package_version"
    PEM_KEY = "pem"
    SERVERS_KEY = "servers"
    SLASH_SIGN = "/"
    USER_NAME_KEY = "user_name"

    # process exit codes
    SUCCESS = 0
    REMOTE_FAILURE = 1
    VALIDATION_FAILURE = 2

    # url path markers in front of the entity name
    JOB_MARKER = "job"
    NODE_MARKER = "computer"
    VIEW_MARKER = "view"

    CONFIG_XML = "config.xml"
    DEFAULT_TIMEOUT_SECONDS = 60
