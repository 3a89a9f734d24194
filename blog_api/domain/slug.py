"""URL slug derivation for article titles."""

import re
import unicodedata

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(value: str, separator: str = "-") -> str:
    """Turn *value* into a lowercase ASCII slug.

    Accented characters are transliterated to their base letter, ``@`` reads
    as ``at``, and every run of other non-alphanumeric characters collapses
    into a single separator. Leading and trailing separators are dropped.

        >>> slugify("Hello World!!")
        'hello-world'
    """
    ascii_value = (
        unicodedata.normalize("NFKD", value)
        .encode("ascii", "ignore")
        .decode("ascii")
    )
    ascii_value = ascii_value.replace("@", f"{separator}at{separator}").lower()
    return _NON_ALNUM.sub(separator, ascii_value).strip(separator)
