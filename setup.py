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

# Always prefer setuptools over distutils
from setuptools import setup, find_packages
from os import path

here = path.abspath(path.dirname(__file__))

# Get the long description from the README file
with open(path.join(here, 'README.rst'), encoding='utf-8') as f:
    long_description = f.read()

__version__ = None  # Overwritten by executing version.py.
with open(path.join(here, 'cargo_binutils', 'version.py')) as f:
    exec(f.read())

requires = [
    'packaging>=22',
    'sh>=2.0,<3',
    'tomli>=1.1; python_version < "3.11"',
]

test_requires = [
    'pytest',
]

TOOLS = ['nm', 'objcopy', 'objdump', 'profdata', 'size', 'strip']

setup(
    name='cargo-binutils',
    version=__version__,
    description='Cargo subcommands to invoke the LLVM tools shipped with '
                'the Rust toolchain',
    long_description=long_description,
    license='Apache-2.0',

    packages=find_packages(exclude=['contrib', 'docs', 'tests', 'tests.*']),
    python_requires='>=3.7',

    install_requires=requires,

    extras_require={
        'test': test_requires,
    },

    entry_points={
        'console_scripts':
            ['cargo-%s = cargo_binutils.cli:cargo_%s' % (t, t) for t in TOOLS] +
            ['rust-%s = cargo_binutils.cli:rust_%s' % (t, t) for t in TOOLS],
    },
    test_suite='tests',
)
