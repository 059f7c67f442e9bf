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

import os
import tempfile
import textwrap

HOST = 'x86_64-unknown-linux-gnu'

RUSTC_VV = textwrap.dedent('''\
    rustc 1.75.0 (82e1608df 2023-12-21)
    binary: rustc
    commit-hash: 82e1608dfa6e0b5569232559e3d385fea5a93112
    commit-date: 2023-12-21
    host: x86_64-unknown-linux-gnu
    release: 1.75.0
    LLVM version: 17.0.6
    ''')

X86_64_CFG = textwrap.dedent('''\
    debug_assertions
    panic="unwind"
    target_arch="x86_64"
    target_endian="little"
    target_env="gnu"
    target_family="unix"
    target_feature="fxsr"
    target_feature="sse"
    target_os="linux"
    target_pointer_width="64"
    unix
    ''')


def write_file(path, contents=''):
    directory = os.path.dirname(path)
    if not os.path.isdir(directory):
        os.makedirs(directory)
    with open(path, 'w') as f:
        f.write(textwrap.dedent(contents))
    return path


def make_executable(path):
    if not os.path.exists(path):
        write_file(path)
    os.chmod(path, 0o755)
    return path


def make_tree(root, files):
    '''Creates `files`, a dict of relative path -> contents, under root.'''
    for relpath, contents in files.items():
        write_file(os.path.join(root, *relpath.split('/')), contents)
    return root


class TemporaryTree(object):
    '''A temporary directory populated with files, removed on exit.'''

    def __init__(self, files=None, executables=()):
        self.files = files or {}
        self.executables = executables
        self._tmp = None

    def __enter__(self):
        self._tmp = tempfile.TemporaryDirectory()
        root = make_tree(os.path.realpath(self._tmp.name), self.files)
        for relpath in self.executables:
            make_executable(os.path.join(root, *relpath.split('/')))
        return root

    def __exit__(self, *exc):
        self._tmp.cleanup()
