import json
import logging
import os
from pathlib import Path

from config_cloner.constants import Constants
from config_cloner.utilities.helper import load_file

logging.basicConfig(filename=os.path.join(os.getcwd(), "config_cloner.log"),
                    filemode="a",
                    format="%(asctime)s,%(msecs)d %(name)s %(levelname)s %(message)s",
                    datefmt="%H:%M:%S",
                    level=logging.INFO)

CONFIGURATIONS_FOLDER = os.path.join(os.path.dirname(os.path.abspath(__file__)), "configurations")


SYSTEM_CONFIG_FILE = os.path.join(CONFIGURATIONS_FOLDER, "system_config.json")

with open(SYSTEM_CONFIG_FILE) as fp:
    _system_config = json.load(fp)


class SystemConfig:
    LIBRARY_NAME = _system_config.get(Constants.LIBRARY_NAME_KEY)
    PACKAGE_NAME = _system_config.get(Constants.PACKAGE_NAME_KEY)
    PACKAGE_VERSION = _system_config.get(Constants.PACKAGE_VERSION_KEY)
    TITLE = f"{_system_config.get('title')} {PACKAGE_VERSION}"


class Credentials:
    def __init__(self, user_name: str = "", api_token: str = "", pem=True):
        self.user_name = user_name
        self.api_token = api_token
        self.pem = pem

    @property
    def auth(self):
        if self.user_name and self.api_token:
            return self.user_name, self.api_token
        return None

    def __repr__(self):
        # never log the token
        return f"Credentials(user_name={self.user_name!r}, pem={self.pem!r})"


class Config:
    DEFAULT_CONFIGURATION_FILE_NAME = "configuration.json"
    LOGGER = logging.getLogger("Config")

    def __init__(self, configuration_file_name: str = None):
        self.user_name = ""
        self.api_token = ""
        self.pem = True
        self.timeout = Constants.DEFAULT_TIMEOUT_SECONDS
        self.dry_run = False
        self.no_stdout = False
        self.servers = {}

        if configuration_file_name:
            self.config_file = configuration_file_name
            self.load_config(required=True)
        else:
            self.config_file = os.path.join(CONFIGURATIONS_FOLDER, Config.DEFAULT_CONFIGURATION_FILE_NAME)
            self.load_config()

    def load_config(self, required=False):
        if Path(self.config_file).is_file():
            Config.LOGGER.info(f"loading configuration from {self.config_file}...")
            config_dict = load_file(self.config_file) or {}
            if not isinstance(config_dict, dict):
                raise ValueError(f"configuration file {self.config_file} must contain a mapping")
            self.__dict__.update((k, v) for k, v in config_dict.items() if k in self.__dict__)
            self.pem = Config.parse_pem(self.pem)
        elif required:
            raise FileNotFoundError(f"configuration file {self.config_file} does not exist")
        else:
            Config.LOGGER.info(f"configuration file {self.config_file} does not exist.")

    # "false" disables certificate verification, anything else is a CA bundle path or True
    @staticmethod
    def parse_pem(pem):
        if isinstance(pem, str) and pem.lower() in ("false", "no", "0"):
            return False
        if isinstance(pem, str) and pem.lower() in ("true", "yes", "1", ""):
            return True
        return pem

    # the longest configured server prefix matching the endpoint wins over the defaults
    def credentials_for(self, endpoint: str) -> Credentials:
        credentials = Credentials(user_name=self.user_name, api_token=self.api_token, pem=self.pem)
        matched = ""
        for prefix, server in (self.servers or {}).items():
            if endpoint.startswith(prefix) and len(prefix) > len(matched):
                matched = prefix
                credentials = Credentials(
                    user_name=server.get(Constants.USER_NAME_KEY, self.user_name),
                    api_token=server.get(Constants.API_TOKEN_KEY, self.api_token),
                    pem=Config.parse_pem(server.get(Constants.PEM_KEY, self.pem)))
        Config.LOGGER.info(f"credentials for {endpoint}: {credentials}")
        return credentials
