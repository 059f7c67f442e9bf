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
Child processes

Every external program (rustc, cargo and the llvm tools) is started through
the helpers in this module. All of them block until the child exits; there
is no timeout.
'''

import logging
import shlex
import sys

import sh

from .exceptions import ProcessSpawnFailure

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def format_command(program, args, cwd=None):
    line = ' '.join(shlex.quote(str(a)) for a in [program] + list(args))
    if cwd is not None:
        line = '(cd %s && %s)' % (shlex.quote(cwd), line)
    return line


def command(program):
    try:
        return sh.Command(program)
    except sh.CommandNotFound:
        raise ProcessSpawnFailure('could not execute `%s`: command not found'
                                  % program)


def _exit_code(error):
    # Children killed by a signal report a negative code
    return error.exit_code if error.exit_code > 0 else 1


def check_output(program, *args):
    '''Runs `program` and returns its standard output as text.

    A nonzero exit raises sh.ErrorReturnCode; a program that can't be
    started raises ProcessSpawnFailure.
    '''
    logger.debug('running %s', format_command(program, args))
    cmd = command(program)
    try:
        return str(cmd(*args, _tty_out=False))
    except (sh.ForkException, OSError) as e:
        raise ProcessSpawnFailure('could not execute `%s`: %s' % (program, e))


def capture(program, args, cwd=None):
    '''Runs `program` with its standard error streamed to ours while it
    runs. Standard output is collected in full.

    Returns an (exit_code, stdout_bytes) tuple. Unsuccessful exits are
    reported through the exit code, not raised.
    '''
    cmd = command(program)
    try:
        proc = cmd(*args, _cwd=cwd, _err=sys.stderr, _tty_out=False,
                   _return_cmd=True)
    except sh.ErrorReturnCode as e:
        return _exit_code(e), e.stdout
    except (sh.ForkException, OSError) as e:
        raise ProcessSpawnFailure('could not execute `%s`: %s' % (program, e))
    return proc.exit_code, proc.stdout


def foreground(program, args, cwd=None):
    '''Runs `program` attached to our stdin, stdout and stderr and returns
    its exit code.
    '''
    cmd = command(program)
    try:
        cmd(*args, _cwd=cwd, _fg=True)
    except sh.ErrorReturnCode as e:
        return _exit_code(e)
    except (sh.ForkException, OSError) as e:
        raise ProcessSpawnFailure('could not execute `%s`: %s' % (program, e))
    return 0
