"""Interactive prompting service."""

import logging
import sys
from typing import Callable, Optional, TextIO

from pydantic import ValidationError

from certman.exceptions import InteractiveInputError
from certman.models.san import SanKind, SubjectAltNames
from certman.models.subject import DistinguishedName
from certman.utils.validators import split_comma_list

logger = logging.getLogger("certman")

# Field name -> prompt, in the order the operator is asked
DN_PROMPTS = (
    ("country", "Country (2 letters) > "),
    ("state_or_province", "State or Province > "),
    ("locality", "Locality > "),
    ("organization", "Organization > "),
    ("common_name", "Common Name > "),
)

SAN_PROMPT = "Subject alt names (comma separated) > "


class Prompter:
    """Line-by-line operator prompts.

    The line reader and the stream used for notices are passed in rather
    than taken from process globals, so tests can script a whole session.
    """

    def __init__(self, readline: Callable[[str], str] = input, out: Optional[TextIO] = None):
        """
        Initialize prompter.

        Args:
            readline: Callable that shows a prompt and returns one line
            out: Stream for notices shown between prompts (default stderr)
        """
        self._readline = readline
        self.out = out if out is not None else sys.stderr

    def ask(self, question: str) -> str:
        """
        Ask one question and return the answer without surrounding whitespace.

        Raises:
            InteractiveInputError: If input ends or is interrupted
        """
        try:
            return self._readline(question).strip()
        except EOFError as e:
            raise InteractiveInputError("input stream closed while prompting") from e
        except KeyboardInterrupt as e:
            raise InteractiveInputError("prompt interrupted") from e

    def confirm(self, question: str, default: bool = True) -> bool:
        """Ask a yes/no question; an empty answer selects the default."""
        suffix = " [Y/n] > " if default else " [y/N] > "
        answer = self.ask(question + suffix).lower()
        if not answer:
            return default
        return answer.startswith("y")

    def notice(self, message: str) -> None:
        print(message, file=self.out)

    def ask_required(self, question: str) -> str:
        """Repeat a question until a non-empty answer is given."""
        while True:
            answer = self.ask(question)
            if answer:
                return answer
            self.notice("A value is required.")

    def prompt_dn(self) -> DistinguishedName:
        """
        Prompt for every distinguished name field.

        The whole set is asked again if the answers do not form a valid DN
        (for example a country code that is not two letters).

        Returns:
            DistinguishedName built from the answers
        """
        while True:
            answers = {field: self.ask_required(question) for field, question in DN_PROMPTS}
            try:
                return DistinguishedName(**answers)
            except ValidationError as e:
                self._report(e)
                logger.debug(f"Rejected distinguished name answers: {e}")

    def prompt_sans(self) -> SubjectAltNames:
        """
        Prompt for a comma separated list of DNS names.

        The question is asked again if a name is not valid (for example a
        non-ASCII name that is not in punycode form).

        Returns:
            SubjectAltNames holding the DNS names (possibly empty)
        """
        while True:
            try:
                return SubjectAltNames.of(SanKind.DNS, split_comma_list(self.ask(SAN_PROMPT)))
            except ValidationError as e:
                self._report(e)
                logger.debug(f"Rejected subject alt name answer: {e}")

    def _report(self, error: ValidationError) -> None:
        for item in error.errors():
            field = ".".join(str(part) for part in item["loc"]) or "value"
            self.notice(f"{field}: {item['msg']}")
