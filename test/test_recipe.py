import os
import tempfile
import unittest
from unittest import mock

from config_cloner.command_response import CommandResult
from config_cloner.destination import Destination
from config_cloner.gateway import RemoteCommandGateway
from config_cloner.recipe import Recipe


class TestRecipe(unittest.TestCase):

    def setUp(self):
        self.folder = tempfile.TemporaryDirectory()
        self.addCleanup(self.folder.cleanup)
        self.gateway = mock.create_autospec(RemoteCommandGateway, instance=True)
        self.gateway.execute.return_value = CommandResult(stdout="<config/>")

    def recipe(self, text):
        path = os.path.join(self.folder.name, "recipe.yaml")
        with open(path, "w") as fp:
            fp.write(text)
        return path

    def run_recipe(self, text, properties=None):
        return Recipe(gateway=self.gateway, properties=properties).run(self.recipe(text))

    def test_fail_if_no_file_provided(self):
        response = Recipe(gateway=self.gateway).run(None)
        self.assertFalse(response.succeeded())

    def test_fail_if_the_file_can_not_be_read(self):
        response = Recipe(gateway=self.gateway).run("there_is_no_such_file.yaml")
        self.assertFalse(response.succeeded())
        self.assertIn("FileNotFoundError", response.stderr())
        self.assertIn("there_is_no_such_file.yaml", response.stderr())

    def test_run_recipe(self):
        response = self.run_recipe(
            "properties:\n"
            "  url: http://old/\n"
            "steps:\n"
            "  - job: ['{url}job/src_job', '{url}job/dst_job']\n"
            "  - view: ['{url}view/src_view', '{url}view/dst_view']\n"
            "    force: true\n"
            "  - node: ['{url}::src_slave', '{url}::dst_slave']\n"
            "    expressions: ['s/config/agent/']\n",
            properties={"url": "http://jenkins/"})

        self.assertTrue(response.succeeded())
        commands = [(call.args[0], call.args[2], call.args[3]) for call in self.gateway.execute.call_args_list]
        dest = Destination("http://jenkins/", "x")
        self.assertEqual([(Destination(dest.endpoint, "src_job"), "get-job", "src_job"),
                          (Destination(dest.endpoint, "dst_job"), "create-job", "dst_job"),
                          (Destination(dest.endpoint, "src_view"), "get-view", "src_view"),
                          (Destination(dest.endpoint, "dst_view"), "update-view", "dst_view"),
                          (Destination(dest.endpoint, "src_slave"), "get-node", "src_slave"),
                          (Destination(dest.endpoint, "dst_slave"), "create-node", "dst_slave")], commands)
        self.assertEqual("<agent/>", self.gateway.execute.call_args_list[-1].args[1])
        self.assertIn("Sending http://jenkins/::dst_slave", response.stdout())

    def test_failed_step_fails_recipe_but_later_steps_run(self):
        def execute(dest, payload, command, entity):
            if command == "create-job" and entity == "dst_job":
                return CommandResult(exit_code=1, stderr="dst_job exists\n")
            return CommandResult(stdout="<config/>")

        self.gateway.execute.side_effect = execute
        response = self.run_recipe(
            "steps:\n"
            "  - job: ['http://j/job/src_job', 'http://j/job/dst_job']\n"
            "  - job: ['http://j/job/src_job', 'http://j/job/src_job']\n"
            "  - job: ['http://j/job/src_job', 'http://j/job/dst_job2']\n")

        self.assertFalse(response.succeeded())
        self.assertEqual(1, response.exit_code())
        self.assertIn("dst_job exists", response.stderr())
        self.assertIn("step 2", response.stderr())
        self.assertEqual("dst_job2", self.gateway.execute.call_args_list[-1].args[3])

    def test_invalid_steps(self):
        for steps in ("  - 42\n", "  - {job: ['http://a/job/x', 'http://b/'], view: []}\n",
                      "  - job: 'http://a/job/x'\n", "  - job: ['{missing}job/x', 'http://b/']\n"):
            with self.subTest(steps=steps):
                response = self.run_recipe("steps:\n" + steps)
                self.assertFalse(response.succeeded())
                self.assertEqual(2, response.exit_code())
        self.gateway.execute.assert_not_called()

    def test_invalid_force_or_expressions(self):
        for options in ("    force: \"no\"\n", "    force: 1\n", "    expressions: 's/a/b/'\n",
                        "    expressions: ['s/a/\\1/']\n"):
            with self.subTest(options=options):
                response = self.run_recipe("steps:\n  - job: ['http://a/job/x', 'http://b/']\n" + options)
                self.assertFalse(response.succeeded())
                self.assertEqual(2, response.exit_code())
        self.gateway.execute.assert_not_called()

    def test_invalid_recipe(self):
        for text in ("- job\n", "steps: 3\n", "steps: [\n"):
            with self.subTest(text=text):
                self.assertFalse(self.run_recipe(text).succeeded())

    def test_empty_recipe_succeeds(self):
        self.assertTrue(self.run_recipe("").succeeded())


if __name__ == '__main__':
    unittest.main()
