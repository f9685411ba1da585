# spotlight_data_client/repositories/tags/tag_ledger.py

import logging
from typing import Awaitable, Callable, Dict, Iterable, List, Protocol, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker, AsyncSession

from spotlight_data_client.config import TaggingConfig
from spotlight_data_client.db import ExhibitORM, TagORM, TaggingORM, TAGGABLE_TYPE, TAGGER_TYPE
from spotlight_data_client.db.base import get_session
from spotlight_data_client.db.uow import AsyncUnitOfWork
from spotlight_data_client.exceptions import DatabaseError
from spotlight_data_client.models.tagging import TagRemoved

logger = logging.getLogger(__name__)

TagRemovedListener = Callable[[TagRemoved], Awaitable[None]]


class Taggable(Protocol):
    """То, что TagLedger ожидает от размечаемой сущности."""
    id: str

    def set_owner_tag_list(self, owner: ExhibitORM, context: str, names: List[str]) -> None: ...
    def pop_owner_tag_lists(self) -> List[Tuple[ExhibitORM, str, List[str]]]: ...
    async def save(self) -> None: ...


def parse_tag_list(value: str | Iterable[str] | None, cfg: TaggingConfig | None = None) -> List[str]:
    """
    Разбирает список тегов: строку через разделитель или итерируемое.
    Пробелы по краям срезаются, пустые значения и повторы отбрасываются,
    порядок первых вхождений сохраняется.
    """
    cfg = cfg or TaggingConfig()
    if value is None:
        return []
    if isinstance(value, str):
        raw = value.split(cfg.delimiter)
    else:
        raw = []
        for item in value:
            raw.extend(str(item).split(cfg.delimiter))

    out: list[str] = []
    seen: set[str] = set()
    for n in raw:
        x = n.strip()
        if cfg.strip_hash and x.startswith("#"):
            x = x[1:].strip()
        if cfg.force_lowercase:
            x = x.lower()
        if not x:
            continue
        if x not in seen:
            seen.add(x)
            out.append(x)
    return out


class TagLedger:
    """
    Теги документов индекса, у которых автором (tagger) выступает выставка.
    Об удалённых связях ledger сообщает подписчикам событием TagRemoved.
    """
    def __init__(self, session_factory: async_sessionmaker[AsyncSession], cfg: TaggingConfig | None = None):
        self._session_factory = session_factory
        self._cfg = cfg or TaggingConfig()
        self._listeners: list[TagRemovedListener] = []

    def subscribe(self, listener: TagRemovedListener) -> None:
        self._listeners.append(listener)

    def parse(self, value: str | Iterable[str] | None) -> List[str]:
        return parse_tag_list(value, self._cfg)

    async def tag(self, tagger: ExhibitORM, taggable: Taggable, with_: str | Iterable[str] | None, on: str = "tags"):
        """
        Заменяет теги выставки tagger на документе и сохраняет документ.
        Сохранение документа (save) само вызывает save_owned_tags и переиндексацию.
        """
        taggable.set_owner_tag_list(tagger, on, self.parse(with_))
        await taggable.save()

    async def save_owned_tags(self, taggable: Taggable) -> List[TagRemoved]:
        pending = taggable.pop_owner_tag_lists()
        if not pending:
            return []

        # Строки tags создаются заранее и отдельно: они общие для всех документов
        # и переживут откат замены связей.
        tags = await self.ensure_many(name for _, _, names in pending for name in names)

        removed: list[TagRemoved] = []
        try:
            async with AsyncUnitOfWork(self._session_factory) as uow:
                for tagger, context, names in pending:
                    removed.extend(await self._replace(uow.session, taggable.id, tagger, context, names, tags))
        except SQLAlchemyError as e:
            logger.error(f"Failed to save tags for document {taggable.id}: {e}")
            raise DatabaseError(f"Failed to save tags: {e}") from e

        await self._emit(removed)
        return removed

    async def _replace(
        self,
        session: AsyncSession,
        taggable_id: str,
        tagger: ExhibitORM,
        context: str,
        names: Sequence[str],
        tags: Dict[str, TagORM],
    ) -> List[TagRemoved]:
        res = await session.execute(
            select(TaggingORM)
            .where(
                TaggingORM.taggable_id == taggable_id,
                TaggingORM.taggable_type == TAGGABLE_TYPE,
                TaggingORM.tagger_id == tagger.id,
                TaggingORM.tagger_type == TAGGER_TYPE,
                TaggingORM.context == context,
            )
            .order_by(TaggingORM.id)
        )
        current = list(res.scalars().unique().all())
        current_names = {t.tag.name for t in current}
        wanted = set(names)

        removed = []
        for tagging in current:
            if tagging.tag.name in wanted:
                continue
            removed.append(TagRemoved(
                tagging_id=tagging.id,
                taggable_id=taggable_id,
                tagger_id=tagger.id,
                tag_name=tagging.tag.name,
            ))
            await session.delete(tagging)

        missing = [n for n in names if n not in current_names]
        for name in missing:
            session.add(TaggingORM(
                tag_id=tags[name].id,
                taggable_id=taggable_id,
                taggable_type=TAGGABLE_TYPE,
                tagger_id=tagger.id,
                tagger_type=TAGGER_TYPE,
                context=context,
            ))
        await session.flush()

        logger.info(
            "Document %s, exhibit %s: +%d -%d tags", taggable_id, tagger.id, len(missing), len(removed)
        )
        return removed

    async def ensure_many(self, names: Iterable[str]) -> Dict[str, TagORM]:
        """
        Гарантирует существование тегов с именами из names и возвращает их по имени.
        Если тег успел создать параллельный запрос, конфликт уникальности
        гасится повторным чтением.
        """
        wanted = list(dict.fromkeys(names))
        if not wanted:
            return {}

        async with get_session(self._session_factory) as session:
            res = await session.execute(select(TagORM).where(TagORM.name.in_(wanted)))
            found = {tag.name: tag for tag in res.scalars().all()}

        for name in wanted:
            if name in found:
                continue
            async with get_session(self._session_factory) as session:
                tag = TagORM(name=name)
                try:
                    session.add(tag)
                    await session.commit()
                    found[name] = tag
                    continue
                except IntegrityError:
                    await session.rollback()
                except SQLAlchemyError as e:
                    await session.rollback()
                    raise DatabaseError(f"Failed to create tag '{name}': {e}") from e
            async with get_session(self._session_factory) as session:
                res = await session.execute(select(TagORM).where(TagORM.name == name))
                found[name] = res.scalar_one()
        return found

    async def remove_tagging(self, tagging_id: int) -> bool:
        async with get_session(self._session_factory) as session:
            try:
                tagging = await session.get(TaggingORM, tagging_id)
                if tagging is None:
                    return False
                event = TagRemoved(
                    tagging_id=tagging.id,
                    taggable_id=tagging.taggable_id,
                    tagger_id=tagging.tagger_id,
                    tag_name=tagging.tag.name,
                )
                await session.delete(tagging)
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise DatabaseError(f"Failed to remove tagging {tagging_id}: {e}") from e
        await self._emit([event])
        return True

    async def _emit(self, events: List[TagRemoved]):
        for event in events:
            for listener in self._listeners:
                await listener(event)

    async def taggings_for(self, document_id: str) -> List[Tuple[ExhibitORM, str]]:
        """Пары (выставка, имя тега) в порядке создания связей."""
        async with get_session(self._session_factory) as session:
            res = await session.execute(
                select(ExhibitORM, TagORM.name)
                .select_from(TaggingORM)
                .join(ExhibitORM, ExhibitORM.id == TaggingORM.tagger_id)
                .join(TagORM, TagORM.id == TaggingORM.tag_id)
                .where(
                    TaggingORM.taggable_id == document_id,
                    TaggingORM.taggable_type == TAGGABLE_TYPE,
                    TaggingORM.tagger_type == TAGGER_TYPE,
                )
                .order_by(TaggingORM.id)
            )
            return [(exhibit, name) for exhibit, name in res.all()]

    async def names_for(self, document_id: str, tagger: ExhibitORM, context: str = "tags") -> List[str]:
        async with get_session(self._session_factory) as session:
            res = await session.execute(
                select(TagORM.name)
                .join(TaggingORM, TaggingORM.tag_id == TagORM.id)
                .where(
                    TaggingORM.taggable_id == document_id,
                    TaggingORM.taggable_type == TAGGABLE_TYPE,
                    TaggingORM.tagger_id == tagger.id,
                    TaggingORM.tagger_type == TAGGER_TYPE,
                    TaggingORM.context == context,
                )
                .order_by(TaggingORM.id)
            )
            return list(res.scalars().all())
