from flash_sqlz import BuilderState, StatementInfo, StatementKind


class TestFluentConstruction:
    """Chaining behaviour of the configuration methods."""

    def test_methods_return_the_same_client(self, fake_client):
        """Should return the client itself from every configuration call."""
        c = fake_client
        assert c.table("t") is c
        assert c.select(["a"]) is c
        assert c.where({"a": 1}) is c
        assert c.order_by("a") is c
        assert c.limit(1) is c
        assert c.offset(1) is c
        assert c.insert({"a": 1}) is c
        assert c.update({"a": 1}) is c
        assert c.delete() is c

    def test_last_statement_kind_wins(self, fake_client):
        """Should keep only the most recent select/insert/update/delete call."""
        fake_client.table("t").insert({"a": 1}).delete()
        assert fake_client.info.kind is StatementKind.DELETE

        fake_client.select()
        assert fake_client.info.kind is StatementKind.SELECT

    def test_select_without_columns_keeps_previous_columns(self, fake_client):
        """Should leave an earlier projection untouched but reset DISTINCT."""
        fake_client.table("t").select(["a"], distinct=True).select()
        assert fake_client.info.columns == ["a"]
        assert fake_client.info.distinct is False

    def test_where_replaces_previous_filters(self, fake_client):
        """Should replace the whole filter mapping on a non-empty call."""
        fake_client.table("t").where({"a": 1}).where({"b": 2})
        assert fake_client.info.where == {"b": 2}

    def test_empty_where_is_a_no_op(self, fake_client):
        """Should keep earlier filters when given an empty mapping."""
        fake_client.table("t").where({"a": 1}).where({})
        assert fake_client.info.where == {"a": 1}

    def test_where_copies_the_mapping(self, fake_client):
        """Should not be affected by later changes to the caller's dict."""
        filters = {"a": 1}
        fake_client.table("t").where(filters)
        filters["b"] = 2
        assert fake_client.info.where == {"a": 1}

    def test_order_by_accumulates(self, fake_client):
        """Should add sort keys, overwriting the direction of repeated columns."""
        fake_client.order_by("a").order_by("b", False).order_by("a", False)
        assert fake_client.info.order_by == {"a": False, "b": False}
        assert list(fake_client.info.order_by) == ["a", "b"]


class TestBuilderState:
    """IDLE -> CONFIGURING -> RENDERED -> EXECUTED -> IDLE."""

    def test_new_client_is_idle_and_empty(self, fake_client):
        assert fake_client.state is BuilderState.IDLE
        assert fake_client.info.is_empty()

    def test_configuration_moves_to_configuring(self, fake_client):
        fake_client.table("t")
        assert fake_client.state is BuilderState.CONFIGURING

    def test_to_sql_does_not_consume_the_statement(self, fake_client):
        """Should leave the configuration in place after a dry render."""
        fake_client.table("t").select().where({"a": 1})
        fake_client.to_sql()
        assert fake_client.info.table == "t"
        assert fake_client.info.where == {"a": 1}
        assert fake_client.state is BuilderState.CONFIGURING

    def test_states_seen_during_execution(self, fake_client, executor):
        """Should be RENDERED while the driver runs and IDLE afterwards."""
        seen = []
        original_query = executor.query

        def spying_query(sql, args):
            seen.append((fake_client.state, fake_client.info.sql))
            return original_query(sql, args)

        executor.query = spying_query
        fake_client.table("t").select().all()

        assert seen == [(BuilderState.RENDERED, "SELECT * FROM `t`")]
        assert fake_client.state is BuilderState.IDLE

    def test_clear_resets_everything(self, fake_client):
        fake_client.table("t").select(["a"], True).where({"a": 1}).limit(3)
        fake_client.clear()
        assert fake_client.info == StatementInfo()
        assert fake_client.state is BuilderState.IDLE
