import pytest

from apps.orders import status as statuses
from core.exceptions import StateError, ValidationError


class TestTransitions:
    @pytest.mark.parametrize('current,new', [
        ('pending', 'confirmed'),
        ('pending', 'shipped'),
        ('confirmed', 'delivered'),
        ('processing', 'cancelled'),
        ('shipped', 'delivered'),
    ])
    def test_forward_moves_allowed(self, current, new):
        statuses.check_transition(current, new)

    @pytest.mark.parametrize('current,new', [
        ('shipped', 'confirmed'),
        ('pending', 'pending'),
        ('delivered', 'cancelled'),
        ('cancelled', 'pending'),
    ])
    def test_illegal_moves(self, current, new):
        with pytest.raises(StateError) as excinfo:
            statuses.check_transition(current, new)
        assert excinfo.value.current == current
        assert excinfo.value.requested == new

    def test_unknown_status(self):
        with pytest.raises(ValidationError):
            statuses.validate_status('lost')

    def test_terminal_statuses_have_no_exits(self):
        for status in statuses.TERMINAL_STATUSES:
            assert statuses.ALLOWED_TRANSITIONS[status] == []
