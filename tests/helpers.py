"""Test doubles shared across the suite."""

from smartreply.llm.client import Completion

NOW = 1_700_000_000_000


class FixedClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: int = NOW) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeCompletion:
    """Completion service returning scripted responses in order.

    Each entry is either response text or an exception to raise. The last
    entry repeats once the script runs out.
    """

    def __init__(self, *script: str | Exception, tokens_used: int = 42) -> None:
        self.script = list(script) or ['["a", "b", "c"]']
        self.tokens_used = tokens_used
        self.calls: list[dict] = []

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> Completion:
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "model": model,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        item = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(item, Exception):
            raise item
        return Completion(text=item, tokens_used=self.tokens_used)
