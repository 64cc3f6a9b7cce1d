"""
Ошибки движка. У каждой есть reason — код причины, который уходит клиенту
в move_rejected / error и в тело HTTP-ответа.
"""


class GameError(Exception):
    reason = "error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.reason)
        self.message = message or self.reason


class NotFound(GameError):
    reason = "not_found"


class IllegalState(GameError):
    reason = "illegal_state"


class NotParticipant(IllegalState):
    reason = "not_participant"


class SlotOccupied(GameError):
    reason = "slot_occupied"


class WrongTurn(GameError):
    reason = "wrong_turn"


class AlreadyResolved(GameError):
    reason = "already_resolved"


class SelfInvite(GameError):
    reason = "self_invite"


class InvalidSlot(GameError):
    reason = "invalid_slot"


class InvalidRequest(GameError):
    reason = "invalid_request"


class StoreFailure(GameError):
    reason = "store_failure"
