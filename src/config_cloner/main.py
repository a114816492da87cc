import argparse
import logging
import sys

from config_cloner.command_response import CommandResponse
from config_cloner.config import Config, SystemConfig
from config_cloner.connection import ConnectionPool
from config_cloner.constants import Constants
from config_cloner.entity_kinds import EntityKind
from config_cloner.exceptions import ValidationError
from config_cloner.gateway import RemoteCommandGateway
from config_cloner.recipe import Recipe
from config_cloner.transfer import clone
from config_cloner.utilities.helper import parse_key_value

logger = logging.getLogger(__name__)

recipe_command = "recipe"


class ConfigClonerClient:

    def __init__(self, argv=None, stdout=None, stderr=None):
        self._argv = argv
        self._stdout = stdout if stdout else sys.stdout
        self._stderr = stderr if stderr else sys.stderr
        self.config = None

    @staticmethod
    def _parse_args(argv=None):
        # the switches are accepted after the command too; SUPPRESS keeps a value given before the command
        switches = argparse.ArgumentParser(add_help=False)
        switches.add_argument("-n", "--dry-run", dest="dry_run", action="store_true", default=argparse.SUPPRESS,
                              help="if present, fetch only; create, update and delete commands are not sent")
        switches.add_argument("-ns", "--no_stdout", action="store_true", default=argparse.SUPPRESS,
                              help="if present, no_stdout = True, means no stdout")

        parser = argparse.ArgumentParser(prog=SystemConfig.LIBRARY_NAME,
                                         description="clone jobs, views and nodes between Jenkins instances")
        parser.add_argument("-v", "--version", help="if present, print the version information", action="store_true")
        parser.add_argument("-c", "--config", help="configuration file (json or yaml) with the credentials")
        parser.add_argument("-n", "--dry-run", dest="dry_run", action="store_true",
                            help="if present, fetch only; create, update and delete commands are not sent")
        parser.add_argument("-ns", "--no_stdout", action="store_true",
                            help="if present, no_stdout = True, means no stdout")
        subparsers = parser.add_subparsers(dest="command")

        for kind in EntityKind:
            kind_parser = subparsers.add_parser(kind.kind_name, parents=[switches],
                                                help=f"clone a {kind.kind_name} to one or more destinations")
            kind_parser.add_argument("locations", nargs="*",
                                     help=f"source then destinations: <url>/{kind.marker}/<name> or <url>::<name>")
            kind_parser.add_argument("-f", "--force", action="store_true",
                                     help="overwrite the destination configuration if it exists")
            kind_parser.add_argument("-e", "--expression", dest="expressions", action="append", default=[],
                                     help="sed substitution applied to the configuration, like s/src/dst/g; "
                                          "repeatable and applied in order")

        recipe_parser = subparsers.add_parser(recipe_command, parents=[switches],
                                              help="run the clone steps of a yaml recipe")
        recipe_parser.add_argument("recipe_file", nargs="?", help="recipe file")
        recipe_parser.add_argument("-p", "--property", dest="properties", action="append", default=[],
                                   help="recipe property like url=http://jenkins/; repeatable")

        return parser, parser.parse_args(argv)

    def run(self) -> int:
        parser, args = self._parse_args(self._argv)
        if args.version:
            print(SystemConfig.TITLE, file=self._stdout)
            return Constants.SUCCESS
        if not args.command:
            parser.print_help(file=self._stderr)
            return Constants.VALIDATION_FAILURE

        response = CommandResponse()
        try:
            self.config = Config(configuration_file_name=args.config)
        except (OSError, ValueError) as err:
            response.eprintln(f"{type(err).__name__}: {err}").return_code(Constants.VALIDATION_FAILURE)
            return self._finish(response, no_stdout=args.no_stdout)
        dry_run = args.dry_run or self.config.dry_run
        no_stdout = args.no_stdout or self.config.no_stdout
        logger.info(f"command: {args.command}; dry_run: {dry_run}")

        with ConnectionPool(config=self.config) as pool:
            gateway = RemoteCommandGateway(pool=pool, dry_run=dry_run)
            try:
                if args.command == recipe_command:
                    properties = dict(parse_key_value(prop) for prop in args.properties)
                    Recipe(gateway=gateway, properties=properties).run(recipe_file=args.recipe_file,
                                                                       response=response)
                else:
                    clone(gateway=gateway, kind=EntityKind.from_name(args.command), locations=args.locations,
                          force=args.force, expressions=args.expressions, response=response)
            except ValueError as err:
                response.eprintln(f"{type(err).__name__}: {err}").return_code(Constants.VALIDATION_FAILURE)

        return self._finish(response, no_stdout=no_stdout)

    def _finish(self, response: CommandResponse, no_stdout=False) -> int:
        if not no_stdout:
            self._stdout.write(response.stdout())
            self._stderr.write(response.stderr())
        logger.info(f"exit code {response.exit_code()}")
        return response.exit_code()


def main():
    logger.info(f"********** {SystemConfig.TITLE} - start **********")
    exit_code = ConfigClonerClient().run()
    logger.info(f"********** {SystemConfig.TITLE} - done **********")
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
