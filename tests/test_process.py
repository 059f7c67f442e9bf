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
import sys
import unittest

import sh

from cargo_binutils import process
from cargo_binutils.exceptions import ProcessSpawnFailure

from .support import TemporaryTree


def python(code):
    return ['-c', code]


class TestFormatCommand(unittest.TestCase):

    def test_quoting(self):
        self.assertEqual(process.format_command('llvm-size', ['-A', 'my app']),
                         "llvm-size -A 'my app'")

    def test_cwd(self):
        self.assertEqual(process.format_command('llvm-nm', ('app',), '/t/release'),
                         '(cd /t/release && llvm-nm app)')


class TestCommand(unittest.TestCase):

    def test_not_found(self):
        with self.assertRaisesRegex(ProcessSpawnFailure, 'no-such-program'):
            process.command('no-such-program-for-cargo-binutils')


class TestCheckOutput(unittest.TestCase):

    def test_stdout(self):
        self.assertEqual(
            process.check_output(sys.executable, *python('print("hello")')),
            'hello\n')

    def test_failure_raises(self):
        with self.assertRaises(sh.ErrorReturnCode):
            process.check_output(sys.executable,
                                 *python('import sys; sys.exit(2)'))


class TestCapture(unittest.TestCase):

    def test_success(self):
        self.assertEqual(
            process.capture(sys.executable,
                            python('import sys; sys.stdout.write("out")')),
            (0, b'out'))

    def test_exit_code_and_output_on_failure(self):
        self.assertEqual(
            process.capture(sys.executable,
                            python('import sys; sys.stdout.write("partial"); '
                                   'sys.exit(3)')),
            (3, b'partial'))

    def test_binary_output(self):
        code = 'import sys; sys.stdout.buffer.write(bytes(range(256)))'
        exit_code, stdout = process.capture(sys.executable, python(code))
        self.assertEqual(exit_code, 0)
        self.assertEqual(stdout, bytes(range(256)))

    def test_cwd(self):
        with TemporaryTree() as root:
            exit_code, stdout = process.capture(
                sys.executable,
                python('import os, sys; sys.stdout.write(os.getcwd())'),
                cwd=root)
        self.assertEqual(exit_code, 0)
        self.assertEqual(os.path.realpath(stdout.decode('utf-8')), root)


class TestForeground(unittest.TestCase):

    def test_exit_code(self):
        self.assertEqual(
            process.foreground(sys.executable, python('import sys; sys.exit(4)')),
            4)

    def test_success(self):
        self.assertEqual(process.foreground(sys.executable, python('pass')), 0)
