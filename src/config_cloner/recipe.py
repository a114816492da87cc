import logging

import yaml

from config_cloner.command_response import CommandResponse
from config_cloner.constants import Constants
from config_cloner.entity_kinds import EntityKind
from config_cloner.exceptions import ValidationError
from config_cloner.gateway import RemoteCommandGateway
from config_cloner.transfer import clone
from config_cloner.utilities.helper import load_file

expressions_key = "expressions"
force_key = "force"
properties_key = "properties"
steps_key = "steps"


class Recipe:
    """Runs the clone steps of a YAML recipe one after another over the same gateway.

    A recipe looks like::

        properties:
          url: http://jenkins.example.com/
        steps:
          - job: ["{url}job/src_job", "{url}job/dst_job"]
          - view: ["{url}view/src_view", "{url}view/dst_view"]
            force: true
            expressions: ["s/src/dst/g"]

    Every step gets its own response, merged into the response of the whole recipe. A failing step does not
    stop the following ones, but fails the recipe.
    """

    def __init__(self, gateway: RemoteCommandGateway, properties: dict = None, logger: logging.Logger = None):
        self.logger = logger if logger else logging.getLogger(self.__class__.__name__)
        self.gateway = gateway
        self.properties = properties if properties else {}

    def run(self, recipe_file: str, response: CommandResponse = None) -> CommandResponse:
        response = response if response is not None else CommandResponse()
        try:
            recipe = load_file(recipe_file)
        except (OSError, ValueError, yaml.YAMLError) as err:
            response.eprintln(f"{type(err).__name__}: cannot read recipe {recipe_file}: {err}")
            return response.return_code(Constants.VALIDATION_FAILURE)

        try:
            properties, steps = self._read_recipe(recipe)
        except ValidationError as err:
            response.eprintln(f"{type(err).__name__}: {recipe_file}: {err}")
            return response.return_code(Constants.VALIDATION_FAILURE)

        self.logger.info(f"running {len(steps)} steps of recipe {recipe_file}")
        for number, step in enumerate(steps, 1):
            response.merge(self.run_step(number, step, properties))
        return response

    def _read_recipe(self, recipe):
        if recipe is None:
            recipe = {}
        if not isinstance(recipe, dict):
            raise ValidationError("a recipe must be a mapping with properties and steps")
        properties = dict(recipe.get(properties_key) or {})
        properties.update(self.properties)
        steps = recipe.get(steps_key) or []
        if not isinstance(steps, list):
            raise ValidationError(f"{steps_key} must be a list")
        return properties, steps

    def run_step(self, number: int, step, properties: dict) -> CommandResponse:
        step_response = CommandResponse()
        try:
            kind, locations = self._read_step(step, properties)
            force = step.get(force_key, False)
            if not isinstance(force, bool):
                raise ValidationError(f"{force_key} must be true or false, not {force!r}")
            expressions = step.get(expressions_key) or []
            if not isinstance(expressions, list):
                raise ValidationError(f"{expressions_key} must be a list of expressions, not {expressions!r}")
            self.logger.info(f"step {number}: clone {kind.kind_name} {locations}")
            clone(gateway=self.gateway, kind=kind, locations=locations, force=force,
                  expressions=[str(expression) for expression in expressions], response=step_response)
        except ValidationError as err:
            step_response.eprintln(f"step {number}: {err}")
            step_response.return_code(Constants.VALIDATION_FAILURE)
        return step_response

    @staticmethod
    def _read_step(step, properties: dict):
        if not isinstance(step, dict):
            raise ValidationError(f"{step} is not a mapping")
        kinds = [kind for kind in EntityKind if kind.kind_name in step]
        if len(kinds) != 1:
            raise ValidationError(f"{step} must name exactly one of {[kind.kind_name for kind in EntityKind]}")
        kind = kinds[0]
        locations = step.get(kind.kind_name)
        if not isinstance(locations, list):
            raise ValidationError(f"{kind.kind_name} must be a list of locations")
        try:
            return kind, [str(location).format_map(properties) for location in locations]
        except (KeyError, ValueError, IndexError) as err:
            raise ValidationError(f"cannot substitute the properties in {locations}: {err!r}")
