import io
import os

__XMLBUILDER_VERSION = None


def version():
    global __XMLBUILDER_VERSION
    if __XMLBUILDER_VERSION is None:
        with open(os.path.join(get_base_dir(), 'version.txt')) as f:
            __XMLBUILDER_VERSION = f.read().strip()
    return __XMLBUILDER_VERSION


def dev_status():
    _version = version()
    if 'a' in _version:
        return 'Development Status :: 3 - Alpha'
    elif 'b' in _version or 'c' in _version:
        return 'Development Status :: 4 - Beta'
    else:
        return 'Development Status :: 5 - Production/Stable'


def changes():
    """Extract part of changelog pertaining to version.
    """
    _version = version()
    with io.open(os.path.join(get_base_dir(), "CHANGES.txt"), 'r', encoding='utf8') as f:
        lines = []
        for line in f:
            if line.startswith('====='):
                if len(lines) > 1:
                    break
            if lines:
                lines.append(line)
            elif line.startswith(_version):
                lines.append(line)
    return ''.join(lines[:-1])


def get_base_dir():
    return os.path.dirname(os.path.abspath(__file__))
