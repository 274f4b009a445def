"""백업/내보내기/가져오기 대상 테이블 레지스트리입니다.

TABLES는 외래 키 의존 순서(부모 먼저)로 정렬되어 있다. 적재는 이 순서대로,
삭제는 역순으로 수행한다. append_only 테이블(버전 이력)은 지우거나 덮어쓰지 않고
natural_key 기준으로 없는 행만 추가한다.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from app.models import (
    BlogPost,
    CaseStudy,
    ContentSection,
    ContentVersion,
    ExperienceEntry,
    MediaFile,
    Project,
    SiteSettings,
    SkillCategory,
    Tool,
    User,
)

GROUP_CONTENT = "content"
GROUP_MEDIA = "media"
GROUP_SYSTEM = "system"


@dataclass(frozen=True)
class TableSpec:
    name: str
    model: type
    group: str
    natural_key: Tuple[str, ...] = ()
    append_only: bool = False


TABLES: Tuple[TableSpec, ...] = (
    TableSpec("admin_user", User, GROUP_SYSTEM),
    TableSpec("content_section", ContentSection, GROUP_CONTENT),
    TableSpec("site_settings", SiteSettings, GROUP_CONTENT),
    TableSpec("skill_category", SkillCategory, GROUP_CONTENT),
    TableSpec("tool", Tool, GROUP_CONTENT),
    TableSpec("experience_entry", ExperienceEntry, GROUP_CONTENT),
    TableSpec("case_study", CaseStudy, GROUP_CONTENT),
    TableSpec("project", Project, GROUP_CONTENT),
    TableSpec("blog_post", BlogPost, GROUP_CONTENT),
    TableSpec("media_file", MediaFile, GROUP_MEDIA),
    TableSpec(
        "content_version",
        ContentVersion,
        GROUP_SYSTEM,
        natural_key=("content_type", "content_id", "version"),
        append_only=True,
    ),
)

_BY_NAME = {spec.name: spec for spec in TABLES}

CONTENT_TABLES = [spec.name for spec in TABLES if spec.group == GROUP_CONTENT]
MEDIA_TABLES = [spec.name for spec in TABLES if spec.group == GROUP_MEDIA]
SYSTEM_TABLES = [spec.name for spec in TABLES if spec.group == GROUP_SYSTEM]


def get_spec(name: str) -> Optional[TableSpec]:
    return _BY_NAME.get(name)


def natural_key_exists(db, spec: TableSpec, record: Dict[str, Any]) -> bool:
    columns = spec.model.__table__.columns
    filters = [columns[name] == record.get(name) for name in spec.natural_key]
    return db.query(spec.model).filter(*filters).first() is not None


def is_known(name: str) -> bool:
    return name in _BY_NAME


def default_table_names(include_media: bool = False, include_system_data: bool = False) -> List[str]:
    names = list(CONTENT_TABLES)
    if include_media:
        names.extend(MEDIA_TABLES)
    if include_system_data:
        names.extend(SYSTEM_TABLES)
    return names


def resolve_tables(
    names: Optional[Iterable[str]] = None,
    *,
    include_media: bool = False,
    include_system_data: bool = False,
) -> Tuple[List[TableSpec], List[str]]:
    """요청 테이블 목록을 의존 순서로 정렬해 돌려준다.

    Returns:
        (정렬된 TableSpec 목록, 알 수 없는 테이블명 목록)
    """
    requested = list(names or [])
    if not requested:
        requested = default_table_names(include_media, include_system_data)
    else:
        if include_media:
            requested.extend(MEDIA_TABLES)
        if include_system_data:
            requested.extend(SYSTEM_TABLES)

    wanted = set(requested)
    unknown = sorted(name for name in wanted if name not in _BY_NAME)
    ordered = [spec for spec in TABLES if spec.name in wanted]
    return ordered, unknown
