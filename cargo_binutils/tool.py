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

import collections
import enum
import logging
import os

from . import llvm, process, toolchain

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


@enum.unique
class Tool(enum.Enum):
    NM = 'nm'
    OBJCOPY = 'objcopy'
    OBJDUMP = 'objdump'
    PROFDATA = 'profdata'
    SIZE = 'size'
    STRIP = 'strip'

    @property
    def exe_name(self):
        return 'llvm-%s' % self.value

    @property
    def needs_build(self):
        '''Whether the project has to be built before running the tool.'''
        return self is not Tool.PROFDATA

    @property
    def relative_artifact(self):
        '''Whether the tool reports on the artifact by name.

        These tools are run from the artifact's directory with the bare
        file name, so they print `app` instead of
        `/home/user/project/target/release/app`.
        '''
        return self in (Tool.NM, Tool.OBJDUMP, Tool.SIZE)


class Invocation(collections.namedtuple('Invocation', 'executable args cwd')):

    def run(self):
        '''Returns (exit_code, stdout_bytes).'''
        return process.capture(self.executable, self.args, cwd=self.cwd)

    def __str__(self):
        return process.format_command(self.executable, self.args, self.cwd)


def executable(bindir, tool):
    return os.path.join(bindir, toolchain.exe(tool.exe_name))


def invocation(ctxt, tool, artifact=None, tool_args=()):
    args = []

    if tool is Tool.OBJDUMP:
        args.extend(['--arch-name', llvm.arch_name(ctxt.cfg, ctxt.target)])

    cwd = None
    if artifact is not None:
        if tool.relative_artifact:
            cwd, filename = os.path.split(artifact)
            args.append(filename)
        else:
            args.append(artifact)

    args.extend(tool_args)

    return Invocation(executable(ctxt.bindir, tool), tuple(args), cwd)
