import logging

from config_cloner.command_response import CommandResult
from config_cloner.connection import ConnectionPool
from config_cloner.destination import Destination
from config_cloner.entity_kinds import EntityKind


class RemoteCommandGateway:
    """Issues one remote command against the endpoint of a destination.

    With ``dry_run`` set the create, update and delete commands never reach the server; a successful result
    describing the skipped command is returned instead. Fetches always run.
    """

    def __init__(self, pool: ConnectionPool, dry_run: bool = False, logger: logging.Logger = None):
        self.logger = logger if logger else logging.getLogger(self.__class__.__name__)
        self.pool = pool
        self.dry_run = dry_run

    def execute(self, destination: Destination, payload: str, command_name: str, entity_id: str) -> CommandResult:
        if self.dry_run and EntityKind.is_mutating(command_name):
            self.logger.info(f"dry run: skipping {command_name} {entity_id} on {destination.endpoint}")
            return CommandResult(stdout=f"Dry run: skipping {command_name} {entity_id} on {destination.endpoint}\n")
        connection = self.pool.get(destination.endpoint)
        return connection.execute(command_name, entity_id, payload)
