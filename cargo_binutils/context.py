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
import logging

from . import rustc, toolchain
from .cargo import Config

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class Context(collections.namedtuple(
        'Context', 'bindir build_target cfg target target_source host')):
    '''Everything a run needs to know about the toolchain and the
    compilation target. Built once per invocation and never modified.

    bindir -- directory of the sysroot holding the llvm tools
    build_target -- `[build] target` of `.cargo/config`, if any
    cfg -- rustc.Cfg facts of `target`
    target -- the compilation target in use
    target_source -- rustc.TargetSource saying where `target` came from
    host -- the compiler's host triple
    '''

    @classmethod
    def create(cls, target_flag=None, config=None, cwd=None):
        if config is None:
            config = Config.load(cwd)

        meta = rustc.version_meta()
        logger.debug('rustc %s (host %s, LLVM %s)', meta.release, meta.host,
                     meta.llvm_version)

        sysroot = rustc.sysroot()
        choice = rustc.resolve_target(target_flag, config.build_target,
                                      meta.host)
        logger.debug('target %s (from %s)', choice.triple, choice.source.value)
        cfg = rustc.Cfg.parse(choice.triple)

        bindir = toolchain.find_bindir(sysroot)

        return cls(bindir=bindir, build_target=config.build_target, cfg=cfg,
                   target=choice.triple, target_source=choice.source,
                   host=meta.host)
