"""
Parser runners for Crime Map.

A crime log is decoded into an ordered list of text fields (tokens). Parsers
each know how to interpret some of those fields. A ParserRunner drives a list
of parsers over every field of a document, collecting the crimes they
complete. A OnceRunner drives a single parser only until it first makes
progress, which is enough to pull document metadata out of a report.
"""

from typing import List, Optional, Sequence

from crimemap.log import get_logger
from crimemap.model import (
    ConsumeResult,
    Crime,
    FieldNotParsedError,
    NotParsedError,
    ParseError,
    ParseStatus,
    Report,
    UnitFailedError,
    create_new_crime,
    is_empty_crime,
)

logger = get_logger(__name__)


def no_match() -> ConsumeResult:
    """Result for a parser which does not handle the field."""
    return ConsumeResult(0, ParseStatus.NO_MATCH)


def ok(count: int = 1) -> ConsumeResult:
    """Result for a parser which consumed `count` fields."""
    return ConsumeResult(count, ParseStatus.OK)


def record_complete(count: int = 1) -> ConsumeResult:
    """Result for a parser which consumed `count` fields and finished a crime."""
    return ConsumeResult(count, ParseStatus.RECORD_COMPLETE)


def fatal(reason: str) -> ConsumeResult:
    """Result for a parser which found data it can not interpret or repair."""
    return ConsumeResult(0, ParseStatus.FATAL, reason)


class Parser:
    """
    Extracts information from one or more text fields of a crime log.

    Subclasses implement parse(). Information about the whole document is
    saved in the report, information about the incident currently being
    assembled is saved in the crime. Neither the field list nor the cursor
    may be modified, the number of fields consumed is returned instead.
    """

    name = "Parser"

    def parse(self, i: int, fields: Sequence[str], report: Report, crime: Crime) -> ConsumeResult:
        """
        Interpret fields starting at index i.

        Args:
            i: Index of the field to parse
            fields: All fields of the document
            report: Document metadata, persists across crimes
            crime: Crime currently being assembled

        Returns:
            Number of fields consumed and the parse status
        """
        raise NotImplementedError

    def reset(self) -> None:
        """
        Forget any state carried between calls, before a new document is parsed.
        """
        pass

    def __str__(self) -> str:
        return self.name


def check_result(parser: Parser, i: int, result: ConsumeResult, total: int) -> None:
    """
    Verify a parser result honours the consumption contract.

    Args:
        parser: Parser which produced the result
        i: Cursor the parser was invoked at
        result: Parser result
        total: Number of fields in the document
    """
    if result.status is ParseStatus.NO_MATCH and result.consumed != 0:
        raise ParseError(f"{parser} reported no match but consumed {result.consumed} fields at index {i}")
    if result.status in (ParseStatus.OK, ParseStatus.RECORD_COMPLETE) and result.consumed < 1:
        raise ParseError(f"{parser} reported {result.status.value} without consuming a field at index {i}")
    if i + result.consumed > total:
        raise ParseError(
            f"{parser} consumed {result.consumed} fields at index {i}, past the end of {total} fields"
        )


class ParserRunner:
    """
    Invokes a series of Parsers on a list of fields.

    Parsers are tried in the order they were added, the first one to consume
    one or more fields wins the current position. A field no parser handles
    stops the run.
    """

    def __init__(self, parsers: Optional[List[Parser]] = None):
        self.parsers: List[Parser] = list(parsers or [])
        # Crime which was still open when the last run ended
        self.leftover: Optional[Crime] = None

    def add(self, parser: Parser) -> None:
        """
        Save a parser, it will be tried after all parsers added before it.
        """
        self.parsers.append(parser)

    def parse(self, report: Report, fields: Sequence[str]) -> List[Crime]:
        """
        Parse every field with the added parsers.

        Args:
            report: Report to save document metadata in
            fields: Fields of the document, in reading order

        Returns:
            Crimes completed by the parsers, in document order
        """
        if not self.parsers:
            raise ParseError("no parsers added to runner")

        for parser in self.parsers:
            parser.reset()

        crimes: List[Crime] = []
        crime = create_new_crime()
        total = len(fields)
        i = 0

        logger.debug(f"Running {len(self.parsers)} parsers over {total} fields")

        while i < total:
            for parser in self.parsers:
                result = parser.parse(i, fields, report, crime)

                if result.status is ParseStatus.FATAL:
                    logger.error(f"{parser} failed at field {i} ({fields[i]!r}): {result.reason}")
                    raise UnitFailedError(str(parser), i, result.reason or "unknown error")

                check_result(parser, i, result, total)

                if result.consumed > 0:
                    break
            else:
                raise FieldNotParsedError(i, fields[i])

            if result.status is ParseStatus.RECORD_COMPLETE:
                crimes.append(crime)
                crime = create_new_crime()

            i += result.consumed

        self.leftover = crime
        if not is_empty_crime(crime):
            logger.warning(f"Discarding incomplete crime at end of document: {crime}")

        logger.info(f"Parsed {len(crimes)} crimes from {total} fields")
        return crimes


class OnceRunner:
    """
    Runs a Parser until it parses one or more fields.
    """

    def __init__(self, parser: Parser):
        self.parser = parser

    def parse(self, report: Report, crime: Crime, fields: Sequence[str]) -> int:
        """
        Run the parser from the first field forward until it makes progress.

        Args:
            report: Report to save document metadata in
            crime: Crime the parser may write to
            fields: Fields of the document

        Returns:
            Number of fields the parser consumed
        """
        self.parser.reset()

        for i in range(len(fields)):
            result = self.parser.parse(i, fields, report, crime)

            if result.status is ParseStatus.FATAL:
                raise UnitFailedError(str(self.parser), i, result.reason or "unknown error")

            check_result(self.parser, i, result, len(fields))

            if result.consumed > 0:
                logger.debug(f"{self.parser} parsed {result.consumed} fields at index {i}")
                return result.consumed

        raise NotParsedError(f"{self.parser} did not parse any of {len(fields)} fields")
