from typing import Iterable, Iterator, Tuple

from .types import ChatResult, ConversationTurn, Role


class Conversation:
    """
    Immutable, caller-owned conversation history.

    Every operation returns a new Conversation, so a snapshot handed to a
    provider can't change underneath an in-flight request. The usual cycles are:

        convo = convo.with_user(prompt)
        result = await provider.complete(model, convo)
        convo = convo.apply(result)   # append reply, or drop the user turn

        result = await client.dispatch(model, prompt, history=convo)
        convo = convo.apply(result)   # append prompt and reply, or keep as is
    """

    __slots__ = ("_turns",)

    def __init__(self, turns: Iterable[ConversationTurn] = ()):
        self._turns: Tuple[ConversationTurn, ...] = tuple(turns)

    @property
    def turns(self) -> Tuple[ConversationTurn, ...]:
        return self._turns

    def __iter__(self) -> Iterator[ConversationTurn]:
        return iter(self._turns)

    def __len__(self) -> int:
        return len(self._turns)

    def __getitem__(self, index):
        return self._turns[index]

    def __eq__(self, other) -> bool:
        if not isinstance(other, Conversation):
            return NotImplemented
        return self._turns == other._turns

    def __hash__(self) -> int:
        return hash(self._turns)

    def __repr__(self) -> str:
        return f"Conversation({list(self._turns)!r})"

    def with_user(self, text: str) -> "Conversation":
        return Conversation(self._turns + (ConversationTurn(Role.USER, text),))

    def with_assistant(self, text: str) -> "Conversation":
        return Conversation(self._turns + (ConversationTurn(Role.ASSISTANT, text),))

    def rollback(self) -> "Conversation":
        """
        Drop the trailing user turn, if there is one.

        This is the compensating step for a failed call: the speculative
        user turn appended before the call is removed.
        """
        if self._turns and self._turns[-1].role is Role.USER:
            return Conversation(self._turns[:-1])
        return self

    def apply(self, result: ChatResult) -> "Conversation":
        """
        Fold a call result into the history.

        Results from ``UnifiedChatClient.dispatch`` carry the user turn built
        from the prompt in ``meta['prompt_turn']``; that turn is appended
        together with the reply, and on failure the history is left as it
        was. Otherwise the user turn is expected to be in the history
        already (see ``with_user``).

        Args:
            result: The ChatResult returned by ``complete`` or ``dispatch``.

        Returns:
            Conversation: With the exchange appended on success, or with the
            pending user turn rolled back on failure.
        """
        prompt_turn = result.meta.get("prompt_turn")
        if prompt_turn is not None:
            if not result.ok:
                return self
            return Conversation(self._turns + (prompt_turn,)).with_assistant(result.text)
        if result.ok:
            return self.with_assistant(result.text)
        return self.rollback()
