import unittest
from unittest import mock

from config_cloner.command_response import CommandResult
from config_cloner.connection import ConnectionPool, JenkinsConnection
from config_cloner.destination import Destination
from config_cloner.entity_kinds import EntityKind
from config_cloner.gateway import RemoteCommandGateway
from config_cloner.transfer import ConfigTransfer


class TestRemoteCommandGateway(unittest.TestCase):

    def setUp(self):
        self.connection = mock.create_autospec(JenkinsConnection, instance=True)
        self.connection.execute.return_value = CommandResult(stdout="<project/>")
        self.pool = mock.create_autospec(ConnectionPool, instance=True)
        self.pool.get.return_value = self.connection
        self.destination = Destination("http://h/", "a")

    def test_execute_uses_the_pooled_connection(self):
        result = RemoteCommandGateway(pool=self.pool).execute(self.destination, "<xml/>", "update-job", "a")
        self.pool.get.assert_called_once_with("http://h/")
        self.connection.execute.assert_called_once_with("update-job", "a", "<xml/>")
        self.assertEqual("<project/>", result.stdout)

    def test_dry_run_suppresses_mutating_commands(self):
        gateway = RemoteCommandGateway(pool=self.pool, dry_run=True)
        for kind in EntityKind:
            for command in (kind.create_command, kind.update_command, kind.delete_command):
                with self.subTest(command=command):
                    result = gateway.execute(self.destination, "<xml/>", command, "a")
                    self.assertTrue(result.succeeded())
                    self.assertIn(command, result.stdout)
        self.pool.get.assert_not_called()
        self.connection.execute.assert_not_called()

    def test_dry_run_still_fetches(self):
        gateway = RemoteCommandGateway(pool=self.pool, dry_run=True)
        result = gateway.execute(self.destination, "", "get-view", "a")
        self.connection.execute.assert_called_once_with("get-view", "a", "")
        self.assertEqual("<project/>", result.stdout)

    def test_dry_run_transfer(self):
        gateway = RemoteCommandGateway(pool=self.pool, dry_run=True)
        response = ConfigTransfer(gateway=gateway, kind=EntityKind.JOB, source=self.destination,
                                  destinations=[Destination("http://g/", "b"), Destination("http://i/", "c")],
                                  force=True).run()
        self.assertTrue(response.succeeded())
        self.assertEqual([mock.call("get-job", "a", "")], self.connection.execute.call_args_list)

    def test_failed_fetch_is_returned(self):
        self.connection.execute.return_value = CommandResult(exit_code=1, stderr="refused")
        result = RemoteCommandGateway(pool=self.pool, dry_run=True).execute(self.destination, "", "get-node", "a")
        self.assertFalse(result.succeeded())


class TestEntityKind(unittest.TestCase):

    def test_command_names(self):
        self.assertEqual(("get-job", "create-job", "update-job", "delete-job"),
                         (EntityKind.JOB.fetch_command, EntityKind.JOB.create_command, EntityKind.JOB.update_command,
                          EntityKind.JOB.delete_command))
        self.assertEqual("get-view", EntityKind.VIEW.fetch_command)
        self.assertEqual("update-node", EntityKind.NODE.update_command)

    def test_is_mutating(self):
        self.assertTrue(EntityKind.is_mutating("delete-node"))
        self.assertTrue(EntityKind.is_mutating("create-view"))
        self.assertFalse(EntityKind.is_mutating("get-job"))

    def test_from_name(self):
        self.assertIs(EntityKind.VIEW, EntityKind.from_name("view"))
        with self.assertRaises(ValueError):
            EntityKind.from_name("folder")

    def test_fixup(self):
        destination = Destination("http://h/", "a/b&c")
        node = "<slave>\n  <name>src</name>\n  <label><name>keep</name></label>\n</slave>"
        self.assertEqual("<slave>\n  <name>b&amp;c</name>\n  <label><name>keep</name></label>\n</slave>",
                         EntityKind.NODE.fixup_config(node, destination))
        self.assertEqual(node, EntityKind.JOB.fixup_config(node, destination))


if __name__ == '__main__':
    unittest.main()
