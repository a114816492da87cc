import logging
import re
from enum import Enum
from xml.sax.saxutils import escape

from config_cloner.constants import Constants
from config_cloner.utilities.helper import log_raise_value_error

logger = logging.getLogger(__name__)

# the first <name> element is the one directly under the root of view and node configurations
_name_element_regex = re.compile(r"<name>.*?</name>", re.DOTALL)


class EntityKind(Enum):
    """The kinds of configuration which can be cloned.

    Each kind knows its remote command names, the url marker in front of the entity name
    (``/job/<name>``, ``/view/<name>``, ``/computer/<name>``), whether that marker can be chained
    for nested entities, and how the fetched configuration is fixed up for a destination.
    """
    JOB = ("job", Constants.JOB_MARKER, False, False)
    VIEW = ("view", Constants.VIEW_MARKER, True, True)
    NODE = ("node", Constants.NODE_MARKER, False, True)

    def __init__(self, kind_name, marker, nested, rename):
        self.kind_name = kind_name
        self.marker = marker
        self.nested = nested
        self._rename = rename

    @property
    def fetch_command(self):
        return f"get-{self.kind_name}"

    @property
    def create_command(self):
        return f"create-{self.kind_name}"

    @property
    def update_command(self):
        return f"update-{self.kind_name}"

    @property
    def delete_command(self):
        return f"delete-{self.kind_name}"

    @property
    def mutating_commands(self):
        return self.create_command, self.update_command, self.delete_command

    # view and node configurations embed their own name, which must be the destination one
    def fixup_config(self, config: str, destination) -> str:
        if not self._rename:
            return config
        name = destination.entity.rsplit(Constants.SLASH_SIGN, 1)[-1]
        logger.info(f"renaming the {self.kind_name} configuration to {name}")
        return _name_element_regex.sub(lambda match: f"<name>{escape(name)}</name>", config, count=1)

    @staticmethod
    def is_mutating(command_name: str) -> bool:
        return any(command_name in kind.mutating_commands for kind in EntityKind)

    @staticmethod
    def from_name(kind_name: str):
        for kind in EntityKind:
            if kind.kind_name == kind_name:
                return kind
        log_raise_value_error(local_logger=logger, err=f"unknown entity kind {kind_name}; only "
                                                        f"{[kind.kind_name for kind in EntityKind]} are supported")
