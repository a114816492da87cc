import json
import logging
from pathlib import Path
from pprint import pformat

import yaml

yaml_exts = (".yaml", ".yml")
json_ext = ".json"

logger = logging.getLogger(__name__)


def load_json_file(file_path_name=None):
    logger.info(f"loading json {file_path_name} ...")
    with open(file_path_name) as fp:
        return json.load(fp)


def load_yaml_file(file_path_name=None):
    logger.info(f"loading yaml {file_path_name} ...")
    with open(file_path_name, 'r') as stream:
        return yaml.safe_load(stream)


# the file type is decided by the extension; anything which is not json is read as yaml
def load_file(file_path_name=None):
    if not file_path_name:
        log_raise_value_error(err="file path cannot be empty")
    if not Path(file_path_name).is_file():
        raise FileNotFoundError(f"File {file_path_name} does not exist")
    if str(file_path_name).endswith(json_ext):
        return load_json_file(file_path_name=file_path_name)
    return load_yaml_file(file_path_name=file_path_name)


def parse_key_value(string, separator="="):
    key, sep, value = string.partition(separator)
    if not sep or not key.strip():
        log_raise_value_error(err=f"{string} is not in the form of key{separator}value")
    return key.strip(), value


def log_raise_value_error(local_logger=logger, item=None, err=None):
    local_logger.error(err)
    if item:
        local_logger.info(pformat(item))
    raise ValueError(err)
