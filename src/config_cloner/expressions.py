import logging
import re

from config_cloner.exceptions import ValidationError

logger = logging.getLogger(__name__)


class SedExpression:
    """A sed substitution ``s<d>regex<d>replacement<d>[flags]`` applied line by line.

    The regex is a Python regular expression. The replacement understands ``&`` for the whole match,
    ``\\1`` to ``\\9`` for groups, ``\\n`` for a newline and backslash escapes of ``&``, ``\\`` and the
    delimiter. Flags: ``g`` replaces every occurrence, ``i`` ignores case, a number ``N`` starts at the
    Nth occurrence.
    """

    def __init__(self, expression: str):
        self.expression = expression
        if len(expression) < 2 or expression[0] != "s":
            raise ValidationError(f"{expression} is not a substitution; expected s/regex/replacement/")
        delimiter = expression[1]
        if delimiter.isalnum() or delimiter in "\\\n ":
            raise ValidationError(f"{expression} uses an invalid delimiter {delimiter!r}")
        parts = self._split(expression[2:], delimiter)
        if len(parts) != 3:
            raise ValidationError(f"{expression} must have exactly three {delimiter} separated parts")
        pattern, replacement, flags = parts

        self.replace_all = False
        self.occurrence = 1
        re_flags = 0
        for number in re.findall(r"\d+", flags):
            self.occurrence = int(number)
        for flag in re.sub(r"\d+", "", flags):
            if flag == "g":
                self.replace_all = True
            elif flag in "iI":
                re_flags |= re.IGNORECASE
            else:
                raise ValidationError(f"{expression} has an unsupported flag {flag!r}")
        if self.occurrence < 1:
            raise ValidationError(f"{expression} occurrence must be a positive number")
        try:
            self.regex = re.compile(pattern, re_flags)
        except re.error as err:
            raise ValidationError(f"{expression} has an invalid regular expression: {err}")
        self._replacement = self._parse_replacement(replacement)
        missing = sorted({token for token in self._replacement
                          if isinstance(token, int) and token > self.regex.groups})
        if missing:
            raise ValidationError(f"{expression} refers to groups {missing} missing from the regular expression")

    # split on the delimiter unless escaped; an escaped delimiter is a literal character
    @staticmethod
    def _split(body: str, delimiter: str):
        parts = [""]
        index = 0
        while index < len(body):
            char = body[index]
            if char == "\\" and index + 1 < len(body):
                following = body[index + 1]
                if following != delimiter:
                    parts[-1] += char + following
                elif len(parts) == 1:
                    parts[-1] += re.escape(following)
                else:
                    parts[-1] += "\\" + following
                index += 2
                continue
            if char == delimiter:
                parts.append("")
            else:
                parts[-1] += char
            index += 1
        return parts

    # the replacement becomes a list of literal strings and group numbers
    @staticmethod
    def _parse_replacement(replacement: str):
        tokens = []
        index = 0
        while index < len(replacement):
            char = replacement[index]
            if char == "&":
                tokens.append(0)
            elif char == "\\" and index + 1 < len(replacement):
                following = replacement[index + 1]
                index += 1
                if following.isdigit():
                    tokens.append(int(following))
                elif following == "n":
                    tokens.append("\n")
                else:
                    tokens.append(following)
            else:
                tokens.append(char)
            index += 1
        return tokens

    def _expand(self, match):
        return "".join(token if isinstance(token, str) else (match.group(token) or "")
                       for token in self._replacement)

    def _apply_line(self, line: str) -> str:
        seen = 0

        def substitute(match):
            nonlocal seen
            seen += 1
            if seen < self.occurrence or (seen > self.occurrence and not self.replace_all):
                return match.group(0)
            return self._expand(match)

        return self.regex.sub(substitute, line)

    def apply(self, text: str) -> str:
        # only \n ends a line, as in sed
        lines = re.findall(r"[^\n]*\n|[^\n]+$", text)
        result = []
        for line in lines:
            content = line.rstrip("\r\n")
            result.append(self._apply_line(content) + line[len(content):])
        return "".join(result)

    def __repr__(self):
        return f"SedExpression({self.expression!r})"


def parse_expressions(expressions) -> list:
    parsed = [SedExpression(expression) for expression in expressions or []]
    if parsed:
        logger.info(f"parsed expressions {parsed}")
    return parsed
