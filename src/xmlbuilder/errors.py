"""Exception classes raised by xmlbuilder.

Errors coming from lxml are wrapped into these classes, with the
original exception chained as ``__cause__``.
"""


class XMLBuilderError(Exception):
    """Main exception base class for xmlbuilder.  All other exceptions
    inherit from this one.
    """


class ParseError(XMLBuilderError):
    """Syntax error while parsing an XML document.

    ``lineno`` and ``offset`` are taken from the parser error, when
    known.
    """
    def __init__(self, message, lineno=None, offset=None):
        super(ParseError, self).__init__(message)
        self.lineno = lineno
        self.offset = offset

    @property
    def position(self):
        if self.lineno is None or self.offset is None:
            return None
        return (self.lineno, self.offset + 1)


class ConfigurationError(XMLBuilderError):
    """Invalid parser options or output properties.
    """


class QueryError(XMLBuilderError):
    """XPath or CSS expression that cannot be evaluated, or whose result
    does not have the requested shape.
    """


class InvalidArgumentError(XMLBuilderError, ValueError):
    """A required argument is missing or has an illegal value.
    """


class InvalidStateError(XMLBuilderError):
    """The current node does not allow the requested modification.
    """
