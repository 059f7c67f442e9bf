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
Queries against the Rust compiler: version metadata, sysroot and the cfg
facts of a compilation target.
'''

import collections
import enum
import logging
import os
import re

import sh
from packaging import version

from . import process
from .exceptions import InvalidTarget, ProcessSpawnFailure, ToolchainUnavailable

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

CFG_LINE_PATTERN = re.compile(r'^(?P<key>\w+)(="(?P<value>[^"]*)")?$')


def rustc_program():
    return os.environ.get('RUSTC') or 'rustc'


@enum.unique
class Endian(enum.Enum):
    LITTLE = 'little'
    BIG = 'big'


@enum.unique
class TargetSource(enum.Enum):
    FLAG = 'flag'
    CONFIG = 'config'
    HOST = 'host'


TargetChoice = collections.namedtuple('TargetChoice', 'triple source')


class VersionMeta(collections.namedtuple(
        'VersionMeta', 'release host commit_hash llvm_version')):

    @property
    def semver(self):
        # "1.75.0-nightly" -> 1.75.0
        try:
            return version.parse(self.release.split('-')[0])
        except version.InvalidVersion:
            raise ToolchainUnavailable('rustc reported an unknown release: %s'
                                       % self.release)


class Cfg(collections.namedtuple('Cfg', 'arch pointer_width endian os')):

    @classmethod
    def parse(cls, target):
        try:
            output = process.check_output(rustc_program(), '--print', 'cfg',
                                          '--target', target)
        except sh.ErrorReturnCode as e:
            raise InvalidTarget(target, _first_line(e.stderr))
        except ProcessSpawnFailure as e:
            raise ToolchainUnavailable(str(e))
        return parse_cfg(output, target)


def parse_cfg(text, target):
    values = {}
    for line in text.splitlines():
        match = CFG_LINE_PATTERN.match(line.strip())
        if match is None or match.group('value') is None:
            continue
        # target_feature and friends repeat; only the first value matters
        values.setdefault(match.group('key'), match.group('value'))

    if 'target_arch' not in values:
        raise InvalidTarget(target, 'rustc reported no `target_arch`')

    try:
        pointer_width = int(values.get('target_pointer_width', '0'))
        endian = Endian(values.get('target_endian', 'little'))
    except ValueError as e:
        raise InvalidTarget(target, str(e))

    return Cfg(arch=values['target_arch'], pointer_width=pointer_width,
               endian=endian, os=values.get('target_os', 'none'))


def parse_version_meta(text):
    fields = {}
    for line in text.splitlines():
        key, sep, value = line.partition(':')
        if sep:
            fields[key.strip()] = value.strip()

    if not fields.get('host') or not fields.get('release'):
        raise ToolchainUnavailable(
            '`%s -vV` did not report a host triple and release'
            % rustc_program())

    return VersionMeta(release=fields['release'], host=fields['host'],
                       commit_hash=fields.get('commit-hash'),
                       llvm_version=fields.get('LLVM version'))


def version_meta():
    return parse_version_meta(_query('-vV'))


def sysroot():
    return _query('--print', 'sysroot').strip()


def resolve_target(flag, build_target, host):
    '''Picks the compilation target: an explicit `--target` wins over the
    `[build] target` of the project configuration, which wins over the
    host triple.
    '''
    if flag:
        return TargetChoice(flag, TargetSource.FLAG)
    if build_target:
        return TargetChoice(build_target, TargetSource.CONFIG)
    return TargetChoice(host, TargetSource.HOST)


def _query(*args):
    program = rustc_program()
    try:
        return process.check_output(program, *args)
    except ProcessSpawnFailure as e:
        raise ToolchainUnavailable('%s. Is the Rust toolchain installed?' % e)
    except sh.ErrorReturnCode as e:
        raise ToolchainUnavailable('`%s %s` failed: %s'
                                   % (program, ' '.join(args),
                                      _first_line(e.stderr)))


def _first_line(data):
    if isinstance(data, bytes):
        data = data.decode('utf-8', 'replace')
    lines = data.strip().splitlines()
    return lines[0] if lines else 'no output'
