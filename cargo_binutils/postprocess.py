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
Post processing of tool output

Each transform takes the complete standard output of a tool as bytes and
returns the bytes to show to the user. Transforms never fail: output they
don't understand is returned untouched.
'''

import collections
import re

from . import demangle as rust_demangle
from .tool import Tool

SYMBOL_PATTERN = re.compile(br'(?<![\w$.])_?_ZN[\w$.]+')

# llvm-size -o prints an `oct` column where the default has `dec`
BERKELEY_HEADERS = (['text', 'data', 'bss', 'dec', 'hex', 'filename'],
                    ['text', 'data', 'bss', 'oct', 'hex', 'filename'])
SYSV_HEADER = ['section', 'size', 'addr']

UNITS = ('B', 'KiB', 'MiB', 'GiB', 'TiB')

BerkeleyRow = collections.namedtuple('BerkeleyRow', 'text data bss filename')
Section = collections.namedtuple('Section', 'name size addr')
SysvBlock = collections.namedtuple('SysvBlock', 'title sections')


class UnexpectedFormat(Exception):
    pass


def identity(stdout):
    return stdout


def demangle(stdout):
    '''Replaces every mangled Rust symbol in `stdout` by its demangled
    form. Everything else, including symbols that fail to demangle, is
    left as is.
    '''
    def replace(match):
        token = match.group().decode('ascii')
        demangled = rust_demangle.demangle(token)
        if demangled is None:
            return match.group()
        return demangled.encode('utf-8')

    return SYMBOL_PATTERN.sub(replace, stdout)


def human_size(size):
    '''Formats a byte count with binary prefixes: 512 B, 1.5 KiB, ...'''
    if size < 1024:
        return '%d B' % size
    value = float(size)
    for unit in UNITS[1:]:
        value /= 1024
        if round(value, 1) < 1024 or unit == UNITS[-1]:
            return '%.1f %s' % (value, unit)


def parse_number(text):
    '''Parses a number as printed by llvm-size in any of its radixes.'''
    try:
        if text.lower().startswith('0x'):
            return int(text, 16)
        if len(text) > 1 and text.startswith('0'):
            return int(text, 8)
        return int(text, 10)
    except ValueError:
        raise UnexpectedFormat('not a number: %r' % text)


def parse_berkeley(lines):
    lines = [l for l in lines if l.strip()]
    if not lines or lines[0].split() not in BERKELEY_HEADERS:
        raise UnexpectedFormat('not berkeley format')

    rows = []
    for line in lines[1:]:
        fields = line.split(None, 5)
        if len(fields) != 6:
            raise UnexpectedFormat('short row: %r' % line)
        rows.append(BerkeleyRow(parse_number(fields[0]),
                                parse_number(fields[1]),
                                parse_number(fields[2]),
                                fields[5]))
    if not rows:
        raise UnexpectedFormat('no rows')
    return rows


def parse_sysv(lines):
    blocks = []
    lines = iter(lines)
    for line in lines:
        if not line.strip():
            continue
        if not line.rstrip().endswith(':'):
            raise UnexpectedFormat('expected a file name: %r' % line)
        title = line.rstrip()[:-1].rstrip()

        header = next(lines, '')
        if header.split() != SYSV_HEADER:
            raise UnexpectedFormat('expected a section header: %r' % header)

        sections = []
        for row in lines:
            fields = row.split()
            if len(fields) == 2 and fields[0] == 'Total':
                break
            if len(fields) == 2:
                # Unnamed section
                fields.insert(0, '')
            if len(fields) != 3:
                raise UnexpectedFormat('bad section row: %r' % row)
            sections.append(Section(fields[0], parse_number(fields[1]),
                                    parse_number(fields[2])))
        else:
            raise UnexpectedFormat('missing Total row')

        blocks.append(SysvBlock(title, sections))

    if not blocks:
        raise UnexpectedFormat('no sections')
    return blocks


def _table(rows, right_aligned):
    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]
    lines = []
    for row in rows:
        cells = []
        for i, cell in enumerate(row):
            if i in right_aligned:
                cells.append(cell.rjust(widths[i]))
            else:
                cells.append(cell.ljust(widths[i]))
        lines.append('  '.join(cells).rstrip())
    return lines


def format_berkeley(rows):
    table = [('text', 'data', 'bss', 'total', 'filename')]
    for row in rows:
        table.append((human_size(row.text), human_size(row.data),
                      human_size(row.bss),
                      human_size(row.text + row.data + row.bss),
                      row.filename))
    return '\n'.join(_table(table, right_aligned=(0, 1, 2, 3))) + '\n'


def format_sysv(blocks):
    out = []
    for block in blocks:
        table = [('section', 'size', 'addr')]
        for section in block.sections:
            table.append((section.name, human_size(section.size),
                          '0x%x' % section.addr))
        table.append(('Total', human_size(sum(s.size for s in block.sections)),
                      ''))
        out.append('%s:' % block.title)
        out.extend(_table(table, right_aligned=(1, 2)))
        out.append('')
    return '\n'.join(out) + '\n'


def size(stdout):
    '''Re-formats llvm-size output with human readable sizes and
    recomputed totals.
    '''
    try:
        lines = stdout.decode('utf-8').splitlines()
    except UnicodeDecodeError:
        return stdout

    for parse, render in ((parse_berkeley, format_berkeley),
                          (parse_sysv, format_sysv)):
        try:
            return render(parse(lines)).encode('utf-8')
        except UnexpectedFormat:
            continue
    return stdout


TRANSFORMS = {
    Tool.NM: demangle,
    Tool.OBJDUMP: demangle,
    Tool.SIZE: size,
}


def for_tool(tool):
    return TRANSFORMS.get(tool, identity)


def apply(tool, stdout):
    return for_tool(tool)(stdout)
