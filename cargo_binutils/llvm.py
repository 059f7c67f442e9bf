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

from .rustc import Endian

# target_arch -> (little endian name, big endian name)
ARCH_NAMES = {
    'aarch64': ('aarch64', 'aarch64_be'),
    'arm': ('arm', 'armeb'),
    'avr': ('avr', 'avr'),
    'hexagon': ('hexagon', 'hexagon'),
    'mips': ('mipsel', 'mips'),
    'mips64': ('mips64el', 'mips64'),
    'msp430': ('msp430', 'msp430'),
    'powerpc': ('ppc32', 'ppc32'),
    'powerpc64': ('ppc64le', 'ppc64'),
    'riscv32': ('riscv32', 'riscv32'),
    'riscv64': ('riscv64', 'riscv64'),
    's390x': ('systemz', 'systemz'),
    'sparc': ('sparc', 'sparc'),
    'sparc64': ('sparcv9', 'sparcv9'),
    'wasm32': ('wasm32', 'wasm32'),
    'wasm64': ('wasm64', 'wasm64'),
    'x86': ('x86', 'x86'),
    'x86_64': ('x86-64', 'x86-64'),
}


def arch_name(cfg, target):
    '''Name of the target architecture as llvm-objdump's `--arch-name`
    expects it.
    '''
    big = cfg.endian is Endian.BIG

    # rustc reports target_arch="arm" for both
    if target.startswith('thumb'):
        return 'thumbeb' if big else 'thumb'

    names = ARCH_NAMES.get(cfg.arch)
    if names is None:
        return cfg.arch
    return names[1] if big else names[0]
