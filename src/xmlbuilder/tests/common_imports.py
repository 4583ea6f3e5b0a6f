"""
Common helpers and test data.
To be used in tests.
"""

import os
import tempfile
import unittest

from contextlib import contextmanager

from xmlbuilder import XMLBuilder


EXAMPLE_XML_DOC_START = (
    '<Projects>'
      '<java-xmlbuilder language="Java" scm="SVN">'
        '<Location type="URL">http://code.google.com/p/java-xmlbuilder/</Location>'
      '</java-xmlbuilder>'
      '<JetS3t language="Java" scm="CVS">'
        '<Location type="URL">http://jets3t.s3.amazonaws.com/index.html</Location>'
)

EXAMPLE_XML_DOC_END = (
      '</JetS3t>'
    '</Projects>'
)

EXAMPLE_XML_DOC = EXAMPLE_XML_DOC_START + EXAMPLE_XML_DOC_END


def _bytes(s, encoding="UTF-8"):
    return s.encode(encoding)


def make_suite(*test_classes):
    loader = unittest.defaultTestLoader
    suite = unittest.TestSuite()
    for test_class in test_classes:
        suite.addTests(loader.loadTestsFromTestCase(test_class))
    return suite


class HelperTestCase(unittest.TestCase):
    def parse(self, text, parser=None):
        return XMLBuilder.parse(text, parser)

    def build_example(self):
        return (XMLBuilder.create('Projects')
            .e('java-xmlbuilder')
                .a('language', 'Java')
                .a('scm', 'SVN')
                .e('Location')
                    .a('type', 'URL')
                    .t('http://code.google.com/p/java-xmlbuilder/')
                .up()
            .up()
            .e('JetS3t')
                .a('language', 'Java')
                .a('scm', 'CVS')
                .e('Location')
                    .a('type', 'URL')
                    .t('http://jets3t.s3.amazonaws.com/index.html'))

    def assertStartsWith(self, prefix, text):
        self.assertTrue(text.startswith(prefix),
                        "%r does not start with %r" % (text, prefix))


@contextmanager
def tmpfile(**kwargs):
    handle, filename = tempfile.mkstemp(**kwargs)
    try:
        yield filename
    finally:
        os.close(handle)
        os.remove(filename)
