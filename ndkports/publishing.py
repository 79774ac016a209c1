#
# Copyright (C) 2019 The Android Open Source Project
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
"""Publishing of ports to a local Maven repository."""
from __future__ import annotations

from dataclasses import dataclass, field
import datetime
import fnmatch
import hashlib
import logging
from pathlib import Path
import re
import shlex
import shutil
import subprocess
from typing import List, Optional, Sequence, Tuple
from xml.dom import minidom
from xml.etree import ElementTree

import ndkports.archive


CHECKSUM_ALGORITHMS = ("md5", "sha1", "sha256", "sha512")

POM_NAMESPACE = "http://maven.apache.org/POM/4.0.0"
POM_SCHEMA_LOCATION = (
    "http://maven.apache.org/POM/4.0.0 https://maven.apache.org/xsd/maven-4.0.0.xsd"
)

# Files from the repository that are shipped in the distribution zip.
DISTRIBUTION_PATTERNS = tuple(
    [
        f"*.{ext}{suffix}"
        for ext in ("aar", "pom", "module")
        for suffix in ("", ".asc", ".md5", ".sha1", ".sha256", ".sha512")
    ]
    + [
        "maven-metadata.xml",
        "maven-metadata.xml.asc",
        "maven-metadata.xml.sha256",
        "maven-metadata.xml.sha512",
    ]
)


def logger() -> logging.Logger:
    """Returns the module logger."""
    return logging.getLogger(__name__)


def version_key(version: str) -> Tuple[Tuple[int, int, str], ...]:
    """Sort key ordering Maven versions the way repository metadata expects.

    Numeric components compare numerically and a qualified version sorts
    before the release it qualifies.

    >>> sorted(["1.10", "1.3.1", "1.3.1-SNAPSHOT", "1.3"], key=version_key)
    ['1.3', '1.3.1-SNAPSHOT', '1.3.1', '1.10']
    """
    key = [
        (2, int(part), "") if part.isdigit() else (0, 0, part)
        for part in re.split(r"[.-]", version)
    ]
    return tuple(key + [(1, 0, "")])


@dataclass(frozen=True)
class PomLicense:
    name: str
    url: str
    distribution: str = "repo"


@dataclass(frozen=True)
class PomDeveloper:
    name: str


@dataclass(frozen=True)
class PomMetadata:
    """Descriptive metadata included in the published POM."""

    name: str
    description: str
    url: str
    licenses: Sequence[PomLicense] = ()
    developers: Sequence[PomDeveloper] = ()

    @property
    def scm_url(self) -> str:
        return self.url

    @property
    def scm_connection(self) -> str:
        return f"scm:git:{self.url}.git"


def _sub(
    parent: ElementTree.Element, tag: str, text: Optional[str] = None
) -> ElementTree.Element:
    element = ElementTree.SubElement(parent, tag)
    if text is not None:
        element.text = text
    return element


def _to_xml(root: ElementTree.Element) -> str:
    raw = ElementTree.tostring(root, encoding="unicode")
    return minidom.parseString(raw).toprettyxml(indent="  ", encoding="UTF-8").decode(
        "utf-8"
    )


def write_checksums(path: Path) -> List[Path]:
    """Writes a checksum file for each algorithm next to path."""
    data = path.read_bytes()
    written = []
    for algorithm in CHECKSUM_ALGORITHMS:
        checksum_path = path.with_name(f"{path.name}.{algorithm}")
        checksum_path.write_text(hashlib.new(algorithm, data).hexdigest())
        written.append(checksum_path)
    return written


def sign(path: Path) -> Path:
    """Creates an ASCII-armored detached GPG signature for path."""
    signature = path.with_name(f"{path.name}.asc")
    cmd = [
        "gpg",
        "--batch",
        "--yes",
        "--armor",
        "--detach-sign",
        "--output",
        str(signature),
        str(path),
    ]
    logger().info("check_call `%s`", shlex.join(cmd))
    subprocess.check_call(cmd)
    return signature


@dataclass
class MavenPublication:
    group: str
    artifact: str
    version: str
    pom: PomMetadata
    packaging: str = "aar"
    timestamp: datetime.datetime = field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc)
    )

    def artifact_root(self, repo_dir: Path) -> Path:
        return repo_dir.joinpath(*self.group.split(".")) / self.artifact

    def version_dir(self, repo_dir: Path) -> Path:
        return self.artifact_root(repo_dir) / self.version

    @property
    def base_name(self) -> str:
        return f"{self.artifact}-{self.version}"

    def pom_xml(self) -> str:
        project = ElementTree.Element(
            "project",
            {
                "xmlns": POM_NAMESPACE,
                "xmlns:xsi": "http://www.w3.org/2001/XMLSchema-instance",
                "xsi:schemaLocation": POM_SCHEMA_LOCATION,
            },
        )
        _sub(project, "modelVersion", "4.0.0")
        _sub(project, "groupId", self.group)
        _sub(project, "artifactId", self.artifact)
        _sub(project, "version", self.version)
        _sub(project, "packaging", self.packaging)
        _sub(project, "name", self.pom.name)
        _sub(project, "description", self.pom.description)
        _sub(project, "url", self.pom.url)
        if self.pom.licenses:
            licenses = _sub(project, "licenses")
            for pom_license in self.pom.licenses:
                license_element = _sub(licenses, "license")
                _sub(license_element, "name", pom_license.name)
                _sub(license_element, "url", pom_license.url)
                _sub(license_element, "distribution", pom_license.distribution)
        if self.pom.developers:
            developers = _sub(project, "developers")
            for developer in self.pom.developers:
                _sub(_sub(developers, "developer"), "name", developer.name)
        scm = _sub(project, "scm")
        _sub(scm, "connection", self.pom.scm_connection)
        _sub(scm, "url", self.pom.scm_url)
        return _to_xml(project)

    def _existing_versions(self, metadata_path: Path) -> List[str]:
        if not metadata_path.exists():
            return []
        root = ElementTree.parse(metadata_path).getroot()
        return [
            v.text.strip()
            for v in root.iterfind("versioning/versions/version")
            if v.text and v.text.strip()
        ]

    def metadata_xml(self, versions: Sequence[str]) -> str:
        metadata = ElementTree.Element("metadata")
        _sub(metadata, "groupId", self.group)
        _sub(metadata, "artifactId", self.artifact)
        versioning = _sub(metadata, "versioning")
        _sub(versioning, "latest", max(versions, key=version_key))
        releases = [v for v in versions if not v.endswith("-SNAPSHOT")]
        if releases:
            _sub(versioning, "release", max(releases, key=version_key))
        versions_element = _sub(versioning, "versions")
        for version in versions:
            _sub(versions_element, "version", version)
        _sub(versioning, "lastUpdated", self.timestamp.strftime("%Y%m%d%H%M%S"))
        return _to_xml(metadata)

    def publish(self, repo_dir: Path, aar: Path, signed: bool = False) -> List[Path]:
        """Publishes the AAR and its POM to repo_dir.

        Returns:
            Every file written, including checksums and signatures.
        """
        version_dir = self.version_dir(repo_dir)
        version_dir.mkdir(parents=True, exist_ok=True)

        aar_dest = version_dir / f"{self.base_name}.{self.packaging}"
        shutil.copy2(aar, aar_dest)
        pom_dest = version_dir / f"{self.base_name}.pom"
        pom_dest.write_text(self.pom_xml(), encoding="utf-8")

        metadata_path = self.artifact_root(repo_dir) / "maven-metadata.xml"
        versions = self._existing_versions(metadata_path)
        if self.version not in versions:
            versions.append(self.version)
        metadata_path.write_text(self.metadata_xml(versions), encoding="utf-8")

        published: List[Path] = []
        for path in (aar_dest, pom_dest, metadata_path):
            published.append(path)
            if signed:
                published.append(sign(path))
            published.extend(write_checksums(path))
        logger().info(
            "Published %s:%s:%s to %s", self.group, self.artifact, self.version, repo_dir
        )
        return published


def is_distributed(path: Path) -> bool:
    return any(fnmatch.fnmatchcase(path.name, p) for p in DISTRIBUTION_PATTERNS)


def make_distribution(repo_dir: Path, zip_file: Path) -> Path:
    """Zips the publishable contents of a Maven repository."""
    files = [
        p.relative_to(repo_dir)
        for p in repo_dir.rglob("*")
        if p.is_file() and is_distributed(p)
    ]
    if not files:
        raise RuntimeError(f"Nothing to distribute in {repo_dir}")
    return ndkports.archive.make_zip(zip_file, repo_dir, files)
