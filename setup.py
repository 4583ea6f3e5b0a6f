import os
import sys
import os.path

if sys.version_info[:2] < (3, 8):
    print("This xmlbuilder version requires Python 3.8 or later.")
    sys.exit(1)

from setuptools import setup

# versioninfo lives next to this file
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import versioninfo

xmlbuilder_version = versioninfo.version()
print("Building xmlbuilder version %s." % xmlbuilder_version)


def read_requirements(filename="requirements.txt"):
    with open(os.path.join(versioninfo.get_base_dir(), filename)) as f:
        return [line.strip() for line in f
                if line.strip() and not line.lstrip().startswith('#')]


extra_options = {}
extra_options['zip_safe'] = False
extra_options['python_requires'] = (
    # NOTE: keep in sync with Trove classifier list below.
    '>=3.8')
extra_options['install_requires'] = read_requirements()
extra_options['extras_require'] = {
    'test': ['pytest'],
}

extra_options['package_dir'] = {
        '': 'src'
    }

extra_options['packages'] = [
        'xmlbuilder', 'xmlbuilder.tests'
    ]

setup(
    name = "xmlbuilder",
    version = xmlbuilder_version,
    author="xmlbuilder dev team",
    license="Apache License 2.0",
    description=(
        "Cursor style builder for creating, navigating and editing XML"
        " documents on top of lxml."
    ),
    long_description=(("""\
xmlbuilder makes it easy to create XML documents with a chain of method
calls that mirrors the structure of the result.  A builder points to one
element of a document; methods return builders for new children or for
the same element, so that deeply nested documents read like the markup
they produce.

Existing documents can be parsed, navigated with XPath or CSS selectors,
amended and serialised again with configurable output properties.

""") + versioninfo.changes()),
    classifiers=[
        versioninfo.dev_status(),
        'Intended Audience :: Developers',
        'License :: OSI Approved :: Apache Software License',
        # NOTE: keep in sync with 'python_requires' list above.
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Operating System :: OS Independent',
        'Topic :: Text Processing :: Markup :: XML',
        'Topic :: Software Development :: Libraries :: Python Modules'
    ],

    **extra_options
)
