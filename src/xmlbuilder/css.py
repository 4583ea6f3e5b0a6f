"""CSS selectors for locating elements.

Selectors are translated to XPath by cssselect and evaluated like any
other XPath expression, so namespace contexts work the same way: a
``prefix|name`` selector uses the prefixes of the context.
"""

import cssselect

from xmlbuilder.errors import QueryError

__all__ = ['SelectorTranslator', 'css_to_xpath']

_UPPER = 'ABCDEFGHIJKLMNOPQRSTUVWXYZ'
_LOWER = 'abcdefghijklmnopqrstuvwxyz'


class SelectorTranslator(cssselect.GenericTranslator):
    """
    A CSS selector to XPath translator with a case-insensitive
    ``:contains(text)`` pseudo class.
    """
    def xpath_contains_function(self, xpath, function):
        # text content, minus tags, must contain expr
        if function.argument_types() not in (['STRING'], ['IDENT']):
            raise cssselect.ExpressionError(
                "Expected a single string or ident for :contains(), got %r"
                % function.arguments)
        value = function.arguments[0].value
        return xpath.add_condition(
            "contains(translate(string(.), '%s', '%s'), %s)"
            % (_UPPER, _LOWER, self.xpath_literal(value.lower())))


_translator = SelectorTranslator()


def css_to_xpath(selector):
    """Translate a CSS selector into an XPath expression that selects
    the matching elements below (and including) the context node.
    """
    try:
        return _translator.css_to_xpath(selector)
    except cssselect.SelectorError as e:
        raise QueryError("Invalid CSS selector %r: %s" % (selector, e)) from e
