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

import argparse
import logging
import sys

from . import cargo, postprocess, process, rustc, toolchain
from .context import Context
from .exceptions import BinutilsError, BuildFailed
from .tool import Tool, executable, invocation
from .version import __version__

logger = logging.getLogger(__name__)

# Exit status for errors that happen before the tool runs
ERROR_EXIT_CODE = 101

SEPARATOR = '--'


class LevelFormatter(logging.Formatter):
    '''Prefixes messages the way cargo does: "error: ...".'''

    def format(self, record):
        message = super(LevelFormatter, self).format(record)
        return '%s: %s' % (record.levelname.lower(), message)


def configure_logging(verbosity):
    log_level = (logging.DEBUG if verbosity >= 2
                 else logging.INFO if verbosity >= 1
                 else logging.WARNING)

    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler.formatter, LevelFormatter):
            root.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(LevelFormatter('%(message)s'))
    root.addHandler(handler)
    root.setLevel(log_level)


def build_parser(tool):
    parser = argparse.ArgumentParser(
        prog='cargo-%s' % tool.value,
        description='Proxy for the `%s` tool shipped with the Rust toolchain.'
                    % tool.exe_name,
        epilog='Any other arguments, and everything after `--`, are passed '
               'to the final tool invocation.',
        allow_abbrev=False)
    parser.add_argument('--target', metavar='TRIPLE', default=None,
                        help='target triple for which the code is compiled')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='use verbose output (-vv for debug output)')
    parser.add_argument('--version', action='version',
                        version='%(prog)s ' + __version__)

    if tool.needs_build:
        parser.add_argument('--bin', metavar='NAME', default=None,
                            help='build only the specified binary')
        parser.add_argument('--example', metavar='NAME', default=None,
                            help='build only the specified example')
        parser.add_argument('--lib', action='store_true',
                            help="build only this package's library")
        parser.add_argument('--release', action='store_true',
                            help='build artifacts in release mode, with '
                                 'optimizations')
    return parser


def split_arguments(argv):
    '''Splits argv at the first `--`. Returns (ours, tool's).'''
    if SEPARATOR in argv:
        index = argv.index(SEPARATOR)
        return argv[:index], argv[index + 1:]
    return argv, []


def parse_arguments(tool, argv):
    '''Returns the parsed options and the arguments meant for the tool, in
    the order they were given.
    '''
    argv = list(argv)
    # cargo runs `cargo-size size ...`
    if argv and argv[0] == tool.value:
        argv = argv[1:]
    ours, trailing = split_arguments(argv)
    args, extra = build_parser(tool).parse_known_args(ours)
    return args, extra + trailing


def write_output(data):
    out = sys.stdout.buffer
    out.write(data)
    out.flush()


def execute(tool, args, tool_args, cwd=None):
    request = None
    if tool.needs_build:
        request = cargo.ArtifactRequest.from_flags(
            args.bin, args.example, args.lib, args.release)

    config = cargo.Config.load(cwd)
    ctxt = Context.create(args.target, config=config)

    artifact_path = None
    if tool.needs_build:
        project = cargo.Project.find(cwd)
        artifact = request.artifact or project.default_artifact()
        cargo.build(artifact, request.release, args.target, cwd=cwd)
        artifact_path = cargo.resolve(project, config, artifact,
                                      request.profile,
                                      args.target or ctxt.build_target,
                                      cwd=cwd)

    lltool = invocation(ctxt, tool, artifact_path, tool_args)
    logger.info('%s', lltool)

    exit_code, stdout = lltool.run()
    write_output(postprocess.apply(tool, stdout))
    return exit_code


def run(tool, argv=None, cwd=None):
    '''Runs a `cargo <tool>` command line and returns the exit status.'''
    if argv is None:
        argv = sys.argv[1:]

    args, tool_args = parse_arguments(tool, argv)
    configure_logging(args.verbose)

    try:
        return execute(tool, args, tool_args, cwd=cwd)
    except BuildFailed as e:
        return e.exit_code
    except BinutilsError as e:
        logger.error('%s', e)
        return ERROR_EXIT_CODE


def forward(tool, argv=None):
    '''Runs the llvm tool from the sysroot with argv as is.'''
    if argv is None:
        argv = sys.argv[1:]
    configure_logging(0)

    try:
        bindir = toolchain.find_bindir(rustc.sysroot())
        return process.foreground(executable(bindir, tool), list(argv))
    except BinutilsError as e:
        logger.error('%s', e)
        return ERROR_EXIT_CODE


def _entry_point(func, tool):
    def main():
        sys.exit(func(tool))
    main.__name__ = '%s_%s' % (func.__name__, tool.value)
    return main


cargo_nm = _entry_point(run, Tool.NM)
cargo_objcopy = _entry_point(run, Tool.OBJCOPY)
cargo_objdump = _entry_point(run, Tool.OBJDUMP)
cargo_profdata = _entry_point(run, Tool.PROFDATA)
cargo_size = _entry_point(run, Tool.SIZE)
cargo_strip = _entry_point(run, Tool.STRIP)

rust_nm = _entry_point(forward, Tool.NM)
rust_objcopy = _entry_point(forward, Tool.OBJCOPY)
rust_objdump = _entry_point(forward, Tool.OBJDUMP)
rust_profdata = _entry_point(forward, Tool.PROFDATA)
rust_size = _entry_point(forward, Tool.SIZE)
rust_strip = _entry_point(forward, Tool.STRIP)
