import logging

from config_cloner.command_response import CommandResponse, CommandResult
from config_cloner.destination import Destination, parse_destinations
from config_cloner.entity_kinds import EntityKind
from config_cloner.expressions import parse_expressions
from config_cloner.gateway import RemoteCommandGateway


class ConfigTransfer:
    """Fetches the configuration of the source entity once and sends it to every destination.

    Destinations are processed in order and independently: a failed send is merged into the response and
    the next destination is still attempted. A failed fetch ends the transfer before any destination is
    contacted. With ``force`` the destination is updated first and only created when the update fails.
    """

    def __init__(self, gateway: RemoteCommandGateway, kind: EntityKind, source: Destination, destinations,
                 force: bool = False, expressions=(), logger: logging.Logger = None):
        self.logger = logger if logger else logging.getLogger(self.__class__.__name__)
        self.gateway = gateway
        self.kind = kind
        self.source = source
        self.destinations = list(destinations)
        self.force = force
        self.expressions = list(expressions or [])

    def run(self, response: CommandResponse = None) -> CommandResponse:
        response = response if response is not None else CommandResponse()

        response.println(f"Fetching {self.source}")
        fetched = self.gateway.execute(self.source, "", self.kind.fetch_command, self.source.entity)
        if not fetched.succeeded():
            self.logger.error(f"fetching {self.kind.kind_name} {self.source} failed; nothing is sent")
            return response.merge(fetched)

        for destination in self.destinations:
            response.println(f"Sending {destination}")
            self._send(destination, response, fetched)
        return response

    def _send(self, destination: Destination, response: CommandResponse, fetched: CommandResult):
        config = self.transform(fetched.stdout, destination)

        if self.force:
            updated = self.gateway.execute(destination, config, self.kind.update_command, destination.entity)
            # a successful update only resets the return code, its output is not merged
            if updated.succeeded():
                return response.return_code(0)
            self.logger.info(f"updating {destination} failed, so try to create it")

        return response.merge(self.gateway.execute(destination, config, self.kind.create_command,
                                                   destination.entity))

    def transform(self, config: str, destination: Destination) -> str:
        config = self.kind.fixup_config(config, destination)
        for expression in self.expressions:
            config = expression.apply(config)
        return config


# parse the locations and expressions first so that invalid input never reaches a server
def clone(gateway: RemoteCommandGateway, kind: EntityKind, locations, force=False, expressions=(),
          response: CommandResponse = None) -> CommandResponse:
    source, destinations = parse_destinations(locations, kind)
    transfer = ConfigTransfer(gateway=gateway, kind=kind, source=source, destinations=destinations, force=force,
                              expressions=parse_expressions(expressions))
    return transfer.run(response)
