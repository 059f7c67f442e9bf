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
Cargo projects

Reads the bits of Cargo's configuration and manifests that decide where a
build puts its output, runs `cargo build` and finds the artifact the build
produced.
'''

import collections
import enum
import glob
import logging
import os

try:
    import tomllib
except ImportError:  # Python < 3.11
    import tomli as tomllib

from . import process
from .exceptions import (AmbiguousArtifact, ArtifactNotFound, BuildFailed,
                         ConfigError, InvalidRequest, ProjectNotFound)

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

CONFIG_FILENAMES = ('config.toml', 'config')
MANIFEST_FILENAME = 'Cargo.toml'

LIB_PATTERNS = ('lib%s.rlib', 'lib%s.a', 'lib%s.so', 'lib%s.dylib', '%s.dll',
                '%s.lib')


def cargo_program():
    return os.environ.get('CARGO') or 'cargo'


def _load_toml(path):
    try:
        with open(path, 'rb') as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        raise ConfigError('could not parse %s: %s' % (path, e))


def _ancestors(path):
    path = os.path.abspath(path)
    while True:
        yield path
        parent = os.path.dirname(path)
        if parent == path:
            return
        path = parent


class Config(object):
    '''The `[build]` settings of `.cargo/config.toml` (or the older
    `.cargo/config`) found in a directory or any of its parents. The
    nearest file defining a key wins.
    '''

    def __init__(self, build_target=None, target_dir=None):
        self.build_target = build_target
        self.target_dir = target_dir

    @classmethod
    def load(cls, cwd=None):
        config = cls()
        for directory in _ancestors(cwd or os.getcwd()):
            path = cls._config_file(directory)
            if path is None:
                continue
            build = _load_toml(path).get('build', {})
            if not isinstance(build, dict):
                raise ConfigError('%s: `build` must be a table' % path)
            if config.build_target is None and build.get('target'):
                config.build_target = build['target']
            if config.target_dir is None and build.get('target-dir'):
                # Relative to the directory holding `.cargo/`
                config.target_dir = os.path.join(directory, build['target-dir'])
        return config

    @staticmethod
    def _config_file(directory):
        for name in CONFIG_FILENAMES:
            path = os.path.join(directory, '.cargo', name)
            if os.path.isfile(path):
                return path
        return None

    def __repr__(self):
        return '<Config target=%r target-dir=%r>' % (self.build_target,
                                                      self.target_dir)


@enum.unique
class Profile(enum.Enum):
    DEBUG = 'debug'
    RELEASE = 'release'

    @classmethod
    def from_release(cls, release):
        return cls.RELEASE if release else cls.DEBUG


@enum.unique
class ArtifactKind(enum.Enum):
    BIN = 'bin'
    EXAMPLE = 'example'
    LIB = 'lib'


class Artifact(collections.namedtuple('Artifact', 'kind name')):
    '''One build target of a package. `name` is None for the library,
    whose file name comes from the manifest.
    '''

    @classmethod
    def bin(cls, name):
        return cls(ArtifactKind.BIN, name)

    @classmethod
    def example(cls, name):
        return cls(ArtifactKind.EXAMPLE, name)

    @classmethod
    def lib(cls):
        return cls(ArtifactKind.LIB, None)

    def build_args(self):
        if self.kind is ArtifactKind.LIB:
            return ['--lib']
        return ['--%s' % self.kind.value, self.name]

    def __str__(self):
        return ' '.join(self.build_args())


class ArtifactRequest(collections.namedtuple('ArtifactRequest',
                                             'artifact release')):

    @classmethod
    def from_flags(cls, bin_name=None, example_name=None, lib=False,
                   release=False):
        flags = ((Artifact.bin(bin_name), bin_name is not None),
                 (Artifact.example(example_name), example_name is not None),
                 (Artifact.lib(), lib))
        selected = [artifact for artifact, present in flags if present]
        if len(selected) > 1:
            raise InvalidRequest('only one of `--bin`, `--example` or `--lib` '
                                 'may be specified')
        return cls(selected[0] if selected else None, bool(release))

    @property
    def profile(self):
        return Profile.from_release(self.release)


class Project(object):
    '''A package manifest and the workspace it belongs to.'''

    def __init__(self, manifest_path, manifest, workspace_root):
        self.manifest_path = manifest_path
        self.manifest = manifest
        self.root = os.path.dirname(manifest_path)
        self.workspace_root = workspace_root

    @classmethod
    def find(cls, cwd=None):
        cwd = os.path.abspath(cwd or os.getcwd())
        manifest_path = None
        for directory in _ancestors(cwd):
            candidate = os.path.join(directory, MANIFEST_FILENAME)
            if os.path.isfile(candidate):
                manifest_path = candidate
                break
        if manifest_path is None:
            raise ProjectNotFound('could not find `%s` in `%s` or any parent '
                                  'directory' % (MANIFEST_FILENAME, cwd))

        manifest = _load_toml(manifest_path)
        workspace_root = os.path.dirname(manifest_path)
        for directory in _ancestors(workspace_root):
            candidate = os.path.join(directory, MANIFEST_FILENAME)
            if os.path.isfile(candidate) and 'workspace' in _load_toml(candidate):
                workspace_root = directory
                break
        return cls(manifest_path, manifest, workspace_root)

    @property
    def package(self):
        return self.manifest.get('package')

    @property
    def name(self):
        if self.package is None:
            return None
        return self.package.get('name')

    def _require_package(self):
        if self.package is None:
            raise InvalidRequest('%s is a virtual manifest; run this command '
                                 'from a package directory' % self.manifest_path)

    @property
    def lib_name(self):
        self._require_package()
        lib = self.manifest.get('lib', {})
        return lib.get('name') or self.name.replace('-', '_')

    @property
    def has_lib(self):
        if self.package is None:
            return False
        return ('lib' in self.manifest or
                os.path.isfile(os.path.join(self.root, 'src', 'lib.rs')))

    def bin_names(self):
        if self.package is None:
            return []
        names = [b['name'] for b in self.manifest.get('bin', []) if 'name' in b]

        if self.package.get('autobins', True):
            discovered = []
            if os.path.isfile(os.path.join(self.root, 'src', 'main.rs')):
                discovered.append(self.name)
            bin_dir = os.path.join(self.root, 'src', 'bin')
            for path in sorted(glob.glob(os.path.join(bin_dir, '*.rs'))):
                discovered.append(os.path.splitext(os.path.basename(path))[0])
            for path in sorted(glob.glob(os.path.join(bin_dir, '*', 'main.rs'))):
                discovered.append(os.path.basename(os.path.dirname(path)))
            names.extend(n for n in discovered if n not in names)

        return names

    def default_artifact(self):
        '''The package's only build target, for when none was requested.'''
        self._require_package()
        targets = [Artifact.bin(n) for n in self.bin_names()]
        if self.has_lib:
            targets.append(Artifact.lib())

        if len(targets) == 1:
            return targets[0]
        if not targets:
            raise InvalidRequest('package `%s` has no binary or library '
                                 'targets' % self.name)
        raise InvalidRequest('package `%s` has several build targets (%s); '
                             'specify one with `--bin`, `--example` or `--lib`'
                             % (self.name, ', '.join(str(t) for t in targets)))

    def target_dir(self, config, cwd=None):
        env = os.environ.get('CARGO_TARGET_DIR')
        if env:
            # Relative to where cargo was run, unlike `build.target-dir`
            return os.path.join(os.path.abspath(cwd or os.getcwd()), env)
        if config.target_dir:
            return config.target_dir
        return os.path.join(self.workspace_root, 'target')


def build(artifact, release=False, target=None, cwd=None):
    '''Runs `cargo build` for a single artifact.

    Only an explicit `--target` is passed on; Cargo reads `.cargo/config`
    by itself.
    '''
    args = ['build']
    if target:
        args.extend(['--target', target])
    if artifact is not None:
        args.extend(artifact.build_args())
    if release:
        args.append('--release')

    logger.info('%s', process.format_command(cargo_program(), args))
    exit_code = process.foreground(cargo_program(), args, cwd=cwd)
    if exit_code != 0:
        raise BuildFailed(exit_code)


def artifact_dir(target_dir, profile, target=None):
    if target:
        return os.path.join(target_dir, target, profile.value)
    return os.path.join(target_dir, profile.value)


def exe_suffix(target=None):
    if target is None:
        return '.exe' if os.name == 'nt' else ''
    if 'windows' in target:
        return '.exe'
    if target.startswith(('wasm32', 'wasm64')):
        return '.wasm'
    return ''


def candidate_names(artifact, lib_name=None, target=None):
    if artifact.kind is ArtifactKind.LIB:
        return [pattern % lib_name for pattern in LIB_PATTERNS]

    names = [artifact.name]
    suffix = exe_suffix(target)
    if suffix:
        names.append(artifact.name + suffix)
    return names


def select_candidate(paths, directory, patterns):
    '''Picks the artifact among the existing files that match.

    The newest file wins when several match. Files modified at the same
    instant are rejected rather than guessed between.
    '''
    if not paths:
        raise ArtifactNotFound(
            'no artifact matching %s in %s; check that the requested '
            'binary, example or library exists in this project'
            % (' or '.join(patterns), directory))
    if len(paths) == 1:
        return paths[0]

    by_age = sorted(((os.stat(p).st_mtime_ns, p) for p in paths), reverse=True)
    if by_age[0][0] == by_age[1][0]:
        raise AmbiguousArtifact(sorted(paths))
    logger.debug('several artifacts match, using the newest: %s', by_age[0][1])
    return by_age[0][1]


def resolve(project, config, artifact, profile, target=None, cwd=None):
    '''Returns the absolute path of the file `cargo build` produced for
    `artifact`.

    `target` is the triple the build was configured for (from `--target`
    or `[build] target`), or None for the host. `cwd` is the directory
    cargo was run from.
    '''
    directory = artifact_dir(project.target_dir(config, cwd), profile, target)
    if artifact.kind is ArtifactKind.EXAMPLE:
        directory = os.path.join(directory, 'examples')

    lib_name = project.lib_name if artifact.kind is ArtifactKind.LIB else None
    names = candidate_names(artifact, lib_name, target)
    paths = [os.path.join(directory, n) for n in names]
    found = [p for p in paths if os.path.isfile(p)]
    return os.path.abspath(select_candidate(found, directory, names))
