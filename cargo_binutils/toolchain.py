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

import logging
import os
import sys

from .exceptions import ComponentMissing

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

COMPONENT = 'llvm-tools-preview'
MARKER = 'llvm-size'


def exe(name):
    if sys.platform == 'win32':
        return '%s.exe' % name
    return name


def is_executable(path):
    if not os.path.isfile(path):
        return False
    # No execute bit on Windows
    return sys.platform == 'win32' or os.access(path, os.X_OK)


def walk_files(root):
    '''Generates (directory, filename) pairs under root, visiting
    subdirectories in sorted order.
    '''
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for filename in sorted(filenames):
            yield dirpath, filename


def find_bindir(sysroot, marker=MARKER):
    '''Returns the directory of the sysroot that holds the llvm tools,
    identified by the first executable named like `marker`.
    '''
    wanted = exe(marker)
    for dirpath, filename in walk_files(sysroot):
        if filename == wanted and is_executable(os.path.join(dirpath, filename)):
            logger.debug('found %s in %s', wanted, dirpath)
            return dirpath

    raise ComponentMissing(
        '`%s` component is missing or empty. Install it with `rustup '
        'component add %s`' % (COMPONENT, COMPONENT))
