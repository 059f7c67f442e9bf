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

import itertools
import os
import unittest
from unittest import mock

import sh
from packaging import version

from cargo_binutils import rustc
from cargo_binutils.exceptions import (InvalidTarget, ProcessSpawnFailure,
                                       ToolchainUnavailable)

from .support import HOST, RUSTC_VV, X86_64_CFG

THUMB_CFG = '''\
debug_assertions
panic="abort"
target_arch="arm"
target_endian="little"
target_feature="mclass"
target_feature="v5te"
target_os="none"
target_pointer_width="32"
'''


class TestVersionMeta(unittest.TestCase):

    def test_parse(self):
        meta = rustc.parse_version_meta(RUSTC_VV)
        self.assertEqual(meta.host, HOST)
        self.assertEqual(meta.release, '1.75.0')
        self.assertEqual(meta.llvm_version, '17.0.6')
        self.assertEqual(meta.commit_hash,
                         '82e1608dfa6e0b5569232559e3d385fea5a93112')
        self.assertEqual(meta.semver, version.parse('1.75.0'))

    def test_nightly_release(self):
        meta = rustc.parse_version_meta(
            RUSTC_VV.replace('release: 1.75.0', 'release: 1.77.0-nightly'))
        self.assertEqual(meta.semver, version.parse('1.77.0'))

    def test_unparseable_release(self):
        meta = rustc.parse_version_meta(
            RUSTC_VV.replace('release: 1.75.0', 'release: custom build'))
        self.assertEqual(meta.release, 'custom build')
        with self.assertRaisesRegex(ToolchainUnavailable, 'custom build'):
            meta.semver

    def test_missing_host(self):
        with self.assertRaises(ToolchainUnavailable):
            rustc.parse_version_meta('rustc 1.75.0\nrelease: 1.75.0\n')

    @mock.patch.dict(os.environ, {'RUSTC': '/opt/rust/bin/rustc'})
    @mock.patch('cargo_binutils.process.check_output', return_value=RUSTC_VV)
    def test_queries_rustc_from_environment(self, mock_check_output):
        self.assertEqual(rustc.version_meta().host, HOST)
        mock_check_output.assert_called_once_with('/opt/rust/bin/rustc', '-vV')

    @mock.patch('cargo_binutils.process.check_output',
                side_effect=ProcessSpawnFailure('command not found'))
    def test_missing_compiler(self, mock_check_output):
        with self.assertRaises(ToolchainUnavailable):
            rustc.version_meta()

    @mock.patch('cargo_binutils.process.check_output',
                side_effect=sh.ErrorReturnCode_1('rustc -vV', b'',
                                                 b'error: toolchain not installed\n'))
    def test_failing_compiler(self, mock_check_output):
        with self.assertRaisesRegex(ToolchainUnavailable,
                                    'toolchain not installed'):
            rustc.version_meta()


class TestSysroot(unittest.TestCase):

    @mock.patch('cargo_binutils.process.check_output',
                return_value='/home/user/.rustup/toolchains/stable\n')
    def test_strips_newline(self, mock_check_output):
        self.assertEqual(rustc.sysroot(), '/home/user/.rustup/toolchains/stable')
        self.assertEqual(mock_check_output.call_args[0][1:],
                         ('--print', 'sysroot'))


class TestCfg(unittest.TestCase):

    def test_parse_host(self):
        cfg = rustc.parse_cfg(X86_64_CFG, HOST)
        self.assertEqual(cfg, rustc.Cfg(arch='x86_64', pointer_width=64,
                                        endian=rustc.Endian.LITTLE,
                                        os='linux'))

    def test_parse_embedded(self):
        cfg = rustc.parse_cfg(THUMB_CFG, 'thumbv7m-none-eabi')
        self.assertEqual(cfg.arch, 'arm')
        self.assertEqual(cfg.pointer_width, 32)
        self.assertEqual(cfg.os, 'none')

    def test_big_endian(self):
        cfg = rustc.parse_cfg(
            X86_64_CFG.replace('target_endian="little"', 'target_endian="big"'),
            HOST)
        self.assertIs(cfg.endian, rustc.Endian.BIG)

    def test_missing_arch(self):
        with self.assertRaisesRegex(InvalidTarget, 'weird-target'):
            rustc.parse_cfg('unix\ntarget_os="linux"\n', 'weird-target')

    def test_bad_pointer_width(self):
        with self.assertRaises(InvalidTarget):
            rustc.parse_cfg(X86_64_CFG.replace('"64"', '"lots"'), HOST)

    @mock.patch('cargo_binutils.process.check_output', return_value=THUMB_CFG)
    def test_parse_queries_rustc(self, mock_check_output):
        rustc.Cfg.parse('thumbv7m-none-eabi')
        self.assertEqual(mock_check_output.call_args[0][1:],
                         ('--print', 'cfg', '--target', 'thumbv7m-none-eabi'))

    @mock.patch('cargo_binutils.process.check_output',
                side_effect=sh.ErrorReturnCode_1(
                    'rustc --print cfg', b'',
                    b'error: Error loading target specification\n'))
    def test_unknown_target(self, mock_check_output):
        with self.assertRaises(InvalidTarget) as cm:
            rustc.Cfg.parse('not-a-triple')
        self.assertEqual(cm.exception.target, 'not-a-triple')
        self.assertIn('not-a-triple', str(cm.exception))
        self.assertIn('Error loading target specification', str(cm.exception))


class TestResolveTarget(unittest.TestCase):

    def test_precedence(self):
        flags = (None, '', 'thumbv7em-none-eabihf')
        configs = (None, '', 'riscv32imac-unknown-none-elf')
        for flag, config in itertools.product(flags, configs):
            choice = rustc.resolve_target(flag, config, HOST)
            if flag:
                expected = (flag, rustc.TargetSource.FLAG)
            elif config:
                expected = (config, rustc.TargetSource.CONFIG)
            else:
                expected = (HOST, rustc.TargetSource.HOST)
            self.assertEqual(choice, expected, (flag, config))
