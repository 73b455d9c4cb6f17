"""Tests for relationship declarations, registry validation and inverse resolution."""

import pytest

pytestmark = pytest.mark.unit

from docref.exceptions import ConfigurationError, RelationKindError
from docref.relations.declaration import RelationDeclaration, RelationKind, RelationRegistry
from docref.relations.graph import DocumentGraph
from docref.relations.inverse import InverseResolver
from tests.models import DECLARATIONS, Group, Person, Post, Preference


def _replace(name, owner, **changes):
    """Copy of the test declarations with one of them changed."""
    declarations = []
    for declaration in DECLARATIONS:
        if declaration.name == name and declaration.owner is owner:
            values = {
                "name": declaration.name,
                "owner": declaration.owner,
                "target": declaration.target,
                "foreign_key": declaration.foreign_key,
                "kind": declaration.kind,
                "inverse_of": declaration.inverse_of,
            }
            values.update(changes)
            declaration = RelationDeclaration(**values)
        declarations.append(declaration)
    return declarations


class TestRelationRegistry:
    """Tests for registry lookups."""

    def test_get(self, registry):
        """Test looking up a declared relationship."""
        declaration = registry.get(Person, "posts")
        assert declaration.target is Post
        assert declaration.foreign_key == "post_ids"
        assert declaration.kind is RelationKind.TO_MANY_ARRAY
        assert declaration.inverse_of == "person"

    def test_get_unknown(self, registry):
        """Test looking up an unknown relationship raises."""
        with pytest.raises(ConfigurationError) as exc_info:
            registry.get(Person, "friends")
        assert exc_info.value.model_name == "Person"
        assert exc_info.value.relation_name == "friends"

    def test_relations_for_is_read_only(self, registry):
        """Test the per-type map cannot be changed."""
        relations = registry.relations_for(Person)
        assert set(relations) == {"preferences", "posts", "groups"}
        with pytest.raises(TypeError):
            relations["friends"] = relations["posts"]  # type: ignore[index]

    def test_relations_for_includes_base_classes(self):
        """Test a subclass sees relationships declared on its base."""

        class Author:
            pass

        class Book:
            pass

        class GuestAuthor(Author):
            pass

        registry = RelationRegistry(
            [RelationDeclaration(name="books", owner=Author, target=Book, foreign_key="book_ids")]
        )
        assert registry.get(GuestAuthor, "books").owner is Author

    def test_duplicate_declaration(self):
        """Test declaring the same name twice on a type raises."""
        declaration = DECLARATIONS[0]
        with pytest.raises(ConfigurationError) as exc_info:
            RelationRegistry([declaration, declaration])
        assert "declared twice" in str(exc_info.value)

    def test_iterates_all_declarations(self, registry):
        """Test iterating yields every declaration."""
        assert {str(declaration) for declaration in registry} == {
            "Person.preferences",
            "Person.posts",
            "Post.person",
            "Person.groups",
            "Group.members",
        }


class TestRegistryValidation:
    """Tests for validating declarations against models and inverses."""

    def test_valid_registry(self, registry):
        """Test the test declarations pass validation."""
        assert registry.validate() is registry

    def test_missing_inverse(self):
        """Test an inverse_of naming an undeclared relationship fails."""
        registry = RelationRegistry(_replace("posts", Person, inverse_of="author"))
        with pytest.raises(ConfigurationError) as exc_info:
            registry.validate()
        assert exc_info.value.model_name == "Post"
        assert exc_info.value.relation_name == "author"

    def test_missing_column(self):
        """Test a storage field that is not a column fails."""
        registry = RelationRegistry(_replace("preferences", Person, foreign_key="pref_ids"))
        with pytest.raises(RelationKindError) as exc_info:
            registry.validate()
        assert "pref_ids" in str(exc_info.value)

    def test_array_kind_on_single_column(self):
        """Test an id-array declaration stored in a string column fails."""
        registry = RelationRegistry(_replace("preferences", Person, foreign_key="name"))
        with pytest.raises(RelationKindError):
            registry.validate()

    def test_single_kind_on_array_column(self):
        """Test a to-one declaration stored in a JSON array column fails."""
        registry = RelationRegistry(
            DECLARATIONS
            + [
                RelationDeclaration(
                    name="owner",
                    owner=Group,
                    target=Person,
                    foreign_key="member_ids",
                    kind=RelationKind.TO_ONE,
                )
            ]
        )
        with pytest.raises(RelationKindError) as exc_info:
            registry.validate()
        assert "Group.owner" in str(exc_info.value)

    def test_inverse_targets_other_type(self):
        """Test an inverse whose target is not the declaring type fails."""
        registry = RelationRegistry(
            DECLARATIONS
            + [
                RelationDeclaration(
                    name="reviewed_posts",
                    owner=Group,
                    target=Post,
                    foreign_key="member_ids",
                    inverse_of="person",
                )
            ]
        )
        with pytest.raises(RelationKindError) as exc_info:
            registry.validate()
        assert "not Group" in str(exc_info.value)

    def test_inverse_points_elsewhere(self):
        """Test an inverse that names a different relationship back fails."""
        registry = RelationRegistry(_replace("person", Post, inverse_of="groups"))
        with pytest.raises(RelationKindError) as exc_info:
            registry.validate()
        assert "points back at 'groups'" in str(exc_info.value)

    def test_graph_validates_on_creation(self, store):
        """Test a graph refuses a broken registry when validation is on."""
        registry = RelationRegistry(_replace("posts", Person, inverse_of="author"))
        with pytest.raises(ConfigurationError):
            DocumentGraph(registry, store, validate=True)

    def test_graph_skips_validation(self, store):
        """Test validation can be turned off."""
        registry = RelationRegistry(_replace("posts", Person, inverse_of="author"))
        graph = DocumentGraph(registry, store, validate=False)
        assert graph.registry is registry


class TestInverseResolver:
    """Tests for resolving inverses on target documents."""

    def test_resolve_to_one(self, registry):
        """Test resolving a single-reference inverse."""
        resolver = InverseResolver(registry, registry.get(Person, "posts"))
        inverse = resolver.resolve(Post(id="post-1"))

        assert resolver.has_inverse
        assert inverse.kind is RelationKind.TO_ONE
        assert inverse.foreign_key == "person_id"
        assert inverse.name == "person"

    def test_resolve_to_many_array(self, registry):
        """Test resolving an id-array inverse."""
        resolver = InverseResolver(registry, registry.get(Person, "groups"))
        inverse = resolver.resolve(Group(id="group-1"))

        assert inverse.kind is RelationKind.TO_MANY_ARRAY
        assert inverse.foreign_key == "member_ids"

    def test_resolve_without_inverse(self, registry):
        """Test a one-directional relationship resolves to None."""
        resolver = InverseResolver(registry, registry.get(Person, "preferences"))
        assert not resolver.has_inverse
        assert resolver.resolve(Preference(id="pref-1")) is None

    def test_resolve_undeclared_inverse(self):
        """Test resolving an inverse missing from the target type raises."""
        registry = RelationRegistry(_replace("posts", Person, inverse_of="author"))
        resolver = InverseResolver(registry, registry.get(Person, "posts"))

        with pytest.raises(ConfigurationError) as exc_info:
            resolver.resolve(Post(id="post-1"))
        assert "author" in str(exc_info.value)
        assert "Person.posts" in str(exc_info.value)

    def test_push_with_undeclared_inverse(self, store, person, stored_posts):
        """Test a push fails at resolution time when validation was skipped."""
        registry = RelationRegistry(_replace("posts", Person, inverse_of="author"))
        graph = DocumentGraph(registry, store, validate=False)

        with pytest.raises(ConfigurationError):
            graph.association(person, "posts").push(stored_posts[0])
