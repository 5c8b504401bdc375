import re

# Reasoning models may emit their chain of thought before the answer.
_REASONING_BLOCK = re.compile(
    r"<(think|thinking|reasoning)>.*?</\1>", re.IGNORECASE | re.DOTALL
)
_CONTEXT_BLOCK = re.compile(
    r"<CONTEXT_INFORMATION>.*?</CONTEXT_INFORMATION>", re.IGNORECASE | re.DOTALL
)
_DELIMITER_TAG = re.compile(r"</?TRANSCRIPT>", re.IGNORECASE)


class OutputFilter:
    """Strips protocol artifacts a provider may echo back into its reply."""

    @staticmethod
    def _strip_once(text: str) -> str:
        text = _REASONING_BLOCK.sub("", text)
        text = _CONTEXT_BLOCK.sub("", text)
        text = _DELIMITER_TAG.sub("", text)
        return text.strip()

    @classmethod
    def filter(cls, raw_text: str) -> str:
        # Removing one tag can join the halves of another; repeat until stable.
        text = raw_text
        while True:
            filtered = cls._strip_once(text)
            if filtered == text:
                return filtered
            text = filtered
