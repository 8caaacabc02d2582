"""Flask CLI commands."""


class TestCli:

    def test_users_create_and_list(self, app, db_session):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            "users", "create", "--username", "owner", "--email", "owner@sweetshop.test", "--password", "kalakand88",
        ])
        assert result.exit_code == 0, result.output
        assert "Created user owner" in result.output

        result = runner.invoke(args=["users", "list"])
        assert "owner@sweetshop.test" in result.output

    def test_users_create_rejects_short_password(self, app, db_session):
        result = app.test_cli_runner().invoke(args=[
            "users", "create", "--username", "owner", "--email", "owner@sweetshop.test", "--password", "short",
        ])
        assert result.exit_code != 0

    def test_low_stock(self, app, make_item):
        make_item(name="Pista", quantity=0.5, min_stock=1)
        result = app.test_cli_runner().invoke(args=["inventory", "low-stock"])
        assert result.exit_code == 0
        assert "Pista" in result.output
