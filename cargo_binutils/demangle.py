# Copyright 2024 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

'''
Rust symbol demangling

Handles the "legacy" Rust mangling, which borrows the Itanium C++ nested
name encoding:

    _ZN4core3ptr13drop_in_place17h0123456789abcdefE
      -> core::ptr::drop_in_place::h0123456789abcdef

Each path element is a decimal length followed by that many characters,
the list is terminated by `E`. Characters that aren't valid in symbols are
escaped inside the elements (`$LT$` for `<`, `..` for `::`, ...).

The v0 scheme (`_R...`) is not understood; such symbols are reported as
not demangleable.
'''

import re

PREFIXES = ('__ZN', '_ZN')

ESCAPES = {
    'SP': '@',
    'BP': '*',
    'RF': '&',
    'LT': '<',
    'GT': '>',
    'LP': '(',
    'RP': ')',
    'C': ',',
}

LENGTH_PATTERN = re.compile(r'[1-9][0-9]*')
SPECIAL_PATTERN = re.compile(r'[$.]')


def demangle(symbol):
    '''Returns the demangled form of `symbol`, or None if it isn't a Rust
    legacy symbol.

    A suffix starting with `.` after the closing `E` (such as
    `.llvm.1234`) is kept as is.

    >>> demangle('_ZN3foo3barE')
    'foo::bar'
    '''
    for prefix in PREFIXES:
        if symbol.startswith(prefix):
            inner = symbol[len(prefix):]
            break
    else:
        return None

    elements = []
    pos = 0
    while True:
        if pos >= len(inner):
            return None
        if inner[pos] == 'E':
            pos += 1
            break
        match = LENGTH_PATTERN.match(inner, pos)
        if match is None:
            return None
        length = int(match.group())
        start = match.end()
        if start + length > len(inner):
            return None
        elements.append(inner[start:start + length])
        pos = start + length

    suffix = inner[pos:]
    if not elements or (suffix and not suffix.startswith('.')):
        return None

    return '::'.join(unescape(e) for e in elements) + suffix


def unescape(element):
    if element.startswith('_$'):
        element = element[1:]

    out = []
    rest = element
    while rest:
        if rest.startswith('..'):
            out.append('::')
            rest = rest[2:]
        elif rest.startswith('.'):
            out.append('.')
            rest = rest[1:]
        elif rest.startswith('$'):
            end = rest.find('$', 1)
            if end == -1:
                break
            char = _escape_char(rest[1:end])
            if char is None:
                break
            out.append(char)
            rest = rest[end + 1:]
        else:
            match = SPECIAL_PATTERN.search(rest)
            cut = match.start() if match else len(rest)
            out.append(rest[:cut])
            rest = rest[cut:]

    # Unknown escapes end the decoding; the remainder is shown raw
    out.append(rest)
    return ''.join(out)


def _escape_char(escape):
    if escape in ESCAPES:
        return ESCAPES[escape]
    if escape.startswith('u') and len(escape) > 1:
        try:
            return chr(int(escape[1:], 16))
        except (ValueError, OverflowError):
            return None
    return None
