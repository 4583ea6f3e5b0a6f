"""XPath queries relative to a node.

Evaluation is done by lxml.  This module only prepares the expression and
the namespace mapping, and shapes the result: either a single element,
for moving a builder, or a raw value of a requested type.
"""

import re

from lxml import etree

from xmlbuilder.errors import InvalidArgumentError, QueryError
from xmlbuilder.namespaces import NamespaceContext

__all__ = [
    'STRING', 'NUMBER', 'BOOLEAN', 'NODESET', 'NODE',
    'prepare', 'evaluate', 'find_element', 'query',
]

# result types for query()
STRING = 'string'
NUMBER = 'number'
BOOLEAN = 'boolean'
NODESET = 'nodeset'
NODE = 'node'

_coercions = {
    STRING: 'string(%s)',
    NUMBER: 'number(%s)',
    BOOLEAN: 'boolean(%s)',
}

# string literals and '::' are kept, any other ':' that does not follow a
# name character starts a name test with an empty prefix
_empty_prefix_tokens = re.compile(
    r'''('[^']*'|"[^"]*"|::)|(?<![\w.\-]):(?=[^\W\d]|\*)''')

_DEFAULT_ALIAS = 'xmlbuilder-default'


def _default_alias(context):
    alias = _DEFAULT_ALIAS
    count = 0
    while alias in context:
        count += 1
        alias = '%s%d' % (_DEFAULT_ALIAS, count)
    return alias


def prepare(expression, namespace_context=None):
    """Return the expression and namespace mapping to pass to lxml.

    lxml cannot bind the empty prefix, so the default namespace entry of
    the context is bound to a private prefix and empty-prefix name tests
    are rewritten to use it.
    """
    if namespace_context is None:
        return expression, None
    if not isinstance(namespace_context, NamespaceContext):
        namespace_context = NamespaceContext(namespace_context)
    namespaces = dict((prefix, uri) for prefix, uri in namespace_context.items()
                      if prefix)
    default_uri = namespace_context.get_namespace_uri('')
    if default_uri is not None:
        alias = _default_alias(namespace_context)
        namespaces[alias] = default_uri

        def replace(match):
            if match.group(1):
                return match.group(1)
            return alias + ':'
        expression = _empty_prefix_tokens.sub(replace, expression)
    return expression, namespaces


def evaluate(node, expression, namespace_context=None):
    """Evaluate an XPath expression with ``node`` as context node and
    return lxml's result unchanged.
    """
    if expression is None:
        raise InvalidArgumentError("Illegal null XPath expression")
    path, namespaces = prepare(expression, namespace_context)
    try:
        return node.xpath(path, namespaces=namespaces)
    except etree.XPathError as e:
        raise QueryError(
            "Invalid XPath expression %r: %s" % (expression, e)) from e


def _first(result):
    if isinstance(result, list):
        return result[0] if result else None
    return result


def find_element(node, expression, namespace_context=None):
    """Return the first element selected by the expression.

    Raises QueryError if nothing is found, or if the first result is not
    an element (e.g. an attribute value or a text node).
    """
    found = _first(evaluate(node, expression, namespace_context))
    if not (isinstance(found, etree._Element) and isinstance(found.tag, str)):
        raise QueryError(
            "XPath expression %r does not resolve to an Element in context "
            "%r: %r" % (expression, node, found))
    return found


def query(node, expression, result_type, namespace_context=None):
    """Evaluate an expression and return a result of the requested type.

    ``STRING``, ``NUMBER`` and ``BOOLEAN`` results are converted by the
    XPath functions of the same name, so that an empty match gives an
    empty string, NaN and False respectively.  ``NODESET`` returns a
    list, ``NODE`` the first node or None.
    """
    if result_type in _coercions:
        if expression is None:
            raise InvalidArgumentError("Illegal null XPath expression")
        result = evaluate(
            node, _coercions[result_type] % expression, namespace_context)
        if result_type == STRING:
            return str(result)
        return result
    if result_type not in (NODESET, NODE):
        raise InvalidArgumentError("Unknown XPath result type %r" % result_type)

    result = evaluate(node, expression, namespace_context)
    if not isinstance(result, list):
        raise QueryError(
            "XPath expression %r does not resolve to a node-set: %r"
            % (expression, result))
    if result_type == NODE:
        return _first(result)
    return result
