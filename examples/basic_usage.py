"""Basic usage example for Doc-Ref array-referenced relationships."""

import logging
from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from docref import DocumentGraph, RelationDeclaration, RelationKind, RelationRegistry
from docref.config import configure_logging
from docref.models import Base, DocumentMixin, id_array_column
from docref.storage import Database

logger = logging.getLogger(__name__)


class Person(DocumentMixin, Base):
    __tablename__ = "example_people"

    name: Mapped[str] = mapped_column(String(255), default="")
    post_ids: Mapped[Optional[list[str]]] = id_array_column()


class Post(DocumentMixin, Base):
    __tablename__ = "example_posts"

    title: Mapped[str] = mapped_column(String(255), default="")
    person_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)


REGISTRY = RelationRegistry(
    [
        RelationDeclaration(
            name="posts", owner=Person, target=Post, foreign_key="post_ids", inverse_of="person"
        ),
        RelationDeclaration(
            name="person",
            owner=Post,
            target=Person,
            foreign_key="person_id",
            kind=RelationKind.TO_ONE,
            inverse_of="posts",
        ),
    ]
)


def main():
    """Demonstrate pushing, building, replacing and dereferencing posts."""
    configure_logging("DEBUG")

    # Initialize database (uses SQLite by default)
    db = Database()
    db.create_tables()

    with db.session() as session:
        graph = DocumentGraph.for_session(session, REGISTRY)

        person = Person(name="Ada")
        session.add(person)

        posts = graph.association(person, "posts")
        draft = posts.build({"title": "Notes on the Analytical Engine"})
        session.add(draft)
        logger.info(f"Built post {draft.id}; person.post_ids={person.post_ids}")

        extra = Post(title="Sketch of the Engine")
        session.add(extra)
        posts.push(extra)
        logger.info(f"Pushed post {extra.id}; extra.person_id={extra.person_id}")

        # Replace the whole relationship
        graph.assign(person, "posts", [extra])
        logger.info(f"After assign: post_ids={person.post_ids}, draft.person_id={draft.person_id}")

        graph.association(person, "posts").dereference_all()
        logger.info(f"After dereference: post_ids={person.post_ids}, extra.person_id={extra.person_id}")

    logger.info("All operations completed successfully")


if __name__ == "__main__":
    main()
