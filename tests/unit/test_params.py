"""Unit tests for bind parameter handling."""
import pytest
import sqlalchemy as sa
from sqlfacade.params import BindType, ParameterBinder, TypedBinding
from sqlfacade.params import UntypedBinding, to_binding


class TestBindType:
    """Parsing and coercion of bind type hints."""

    @pytest.mark.parametrize(('hint', 'expected'), [
        ('INT', BindType.INT),
        ('int', BindType.INT),
        ('INT_TYPE', BindType.INT),
        ('PDO::PARAM_INT', BindType.INT),
        ('PARAM_STR', BindType.STR),
        ('string', BindType.STR),
        ('PDO::PARAM_BOOL', BindType.BOOL),
        ('PDO::PARAM_NULL', BindType.NULL),
        ('PDO::PARAM_LOB', BindType.LOB),
        (BindType.INT, BindType.INT),
    ])
    def test_parse(self, hint, expected):
        assert BindType.parse(hint) is expected

    @pytest.mark.parametrize('hint', ['FLOAT', '', 'PDO::PARAM_WHATEVER', 3])
    def test_parse_unknown(self, hint):
        with pytest.raises(ValueError):
            BindType.parse(hint)

    def test_coerce(self):
        assert BindType.INT.coerce('42') == 42
        assert BindType.STR.coerce(42) == '42'
        assert BindType.BOOL.coerce('0') is False
        assert BindType.BOOL.coerce('true') is True
        assert BindType.NULL.coerce('anything') is None
        assert BindType.LOB.coerce('abc') == b'abc'
        assert BindType.INT.coerce(None) is None

    def test_sa_type(self):
        assert isinstance(BindType.INT.sa_type(), sa.Integer)
        assert isinstance(BindType.STR.sa_type(), sa.String)
        assert isinstance(BindType.LOB.sa_type(), sa.LargeBinary)


class TestBinding:
    """Binding names and conversion from tuples."""

    def test_placeholder_prefixed_once(self):
        assert UntypedBinding('id', '42').placeholder == ':id'
        assert UntypedBinding(':id', '42').placeholder == ':id'
        assert UntypedBinding(':id', '42').name == 'id'

    @pytest.mark.parametrize('name', ['', ':', '  ', None])
    def test_empty_name_rejected(self, name):
        with pytest.raises(ValueError):
            UntypedBinding(name, '1')

    def test_two_tuple_is_untyped(self):
        binding = to_binding(('id', '42'))
        assert binding == UntypedBinding('id', '42')
        assert binding.bind_value == '42'

    def test_three_tuple_is_typed(self):
        binding = to_binding(('id', '42', 'INT_TYPE'))
        assert binding == TypedBinding('id', '42', BindType.INT)
        assert binding.bind_value == 42

    @pytest.mark.parametrize('item', [('id',), ('a', 'b', 'INT', 'd'), 'id', 42, ('id', '1', 'NOPE')])
    def test_malformed(self, item):
        with pytest.raises(ValueError):
            to_binding(item)

    def test_untyped_binds_as_string(self):
        param = UntypedBinding('n', 42).bindparam()
        assert param.value == '42'
        assert isinstance(param.type, sa.String)

    def test_untyped_none_stays_null(self):
        assert UntypedBinding('n', None).bindparam().value is None

    def test_typed_bindparam_carries_type(self):
        param = TypedBinding('id', '42', BindType.INT).bindparam()
        assert param.key == 'id'
        assert param.value == 42
        assert isinstance(param.type, sa.Integer)


class TestParameterBinder:
    """Accumulation rules of the pending parameter set."""

    def test_bind_appends(self):
        binder = ParameterBinder()
        binder.bind('a', '1')
        binder.bind('b', '2')
        assert binder.pending == (UntypedBinding('a', '1'), UntypedBinding('b', '2'))

    def test_bind_more_in_key_order(self):
        binder = ParameterBinder()
        binder.bind_more({'f': 'Johnny', 'id': '1'})
        assert [b.name for b in binder] == ['f', 'id']

    def test_set_bind_parameters_is_set_once(self):
        """Second bulk bind before executing is ignored."""
        binder = ParameterBinder()
        binder.set_bind_parameters([('id', '1')])
        binder.set_bind_parameters([('id', '2'), ('other', '3')])
        assert binder.pending == (UntypedBinding('id', '1'),)

    def test_bind_more_after_bind_is_ignored(self):
        binder = ParameterBinder()
        binder.bind('id', '1')
        binder.bind_more({'id': '2'})
        assert len(binder) == 1

    def test_bind_after_bulk_still_appends(self):
        binder = ParameterBinder()
        binder.set_bind_parameters([('id', '1')])
        binder.bind('extra', '2')
        assert len(binder) == 2

    def test_malformed_item_aborts_call(self, recording_logger):
        binder = ParameterBinder(recording_logger)
        binder.set_bind_parameters([('a', '1'), ('b',), ('c', '3')])
        assert binder.pending == (UntypedBinding('a', '1'),)
        assert len(recording_logger.messages('warning')) == 1

    def test_add_dispatches_on_shape(self):
        binder = ParameterBinder()
        binder.add({'a': '1'})
        assert binder.pending == (UntypedBinding('a', '1'),)

        binder.clear()
        binder.add([('a', '1', 'INT')])
        assert binder.pending == (TypedBinding('a', '1', BindType.INT),)

        binder.clear()
        binder.add(None)
        binder.add([])
        assert len(binder) == 0

    def test_apply_binds_by_name(self):
        binder = ParameterBinder()
        binder.set_bind_parameters([('id', '7', 'INT'), ('name', 'Bob')])
        statement = binder.apply(sa.text('select * from t where id = :id and name = :name'))
        compiled = statement.compile()
        assert compiled.params == {'id': 7, 'name': 'Bob'}

    def test_apply_unknown_name_fails(self):
        binder = ParameterBinder()
        binder.bind('missing', '1')
        with pytest.raises(sa.exc.ArgumentError):
            binder.apply(sa.text('select 1'))


if __name__ == '__main__':
    __import__('pytest').main([__file__])
