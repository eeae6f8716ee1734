from fastapi import APIRouter, Depends, Query

from folio.api.dependencies import get_index
from folio.api.schemas import CategoryNode, CategorySchema, TagCountSchema
from folio.core.index import ContentIndex
from folio.core.taxonomy import CategoryTree

router = APIRouter(tags=["taxonomy"])


def _node(tree: CategoryTree, path: str) -> CategoryNode:
    category = tree.nodes[path]
    return CategoryNode(
        **CategorySchema.model_validate(category).model_dump(),
        children=[_node(tree, child) for child in tree.children.get(path, [])],
    )


@router.get("/tags", response_model=list[TagCountSchema])
async def tags(index: ContentIndex = Depends(get_index)) -> list[TagCountSchema]:
    return [TagCountSchema.model_validate(t) for t in await index.tag_counts()]


@router.get("/categories", response_model=list[CategorySchema])
async def categories(
    aggregate: bool = Query(False, description="Count documents of descendant categories too."),
    index: ContentIndex = Depends(get_index),
) -> list[CategorySchema]:
    return [CategorySchema.model_validate(c) for c in await index.categories(aggregate_descendants=aggregate)]


@router.get("/categories/tree", response_model=list[CategoryNode])
async def category_tree(
    aggregate: bool = Query(False),
    index: ContentIndex = Depends(get_index),
) -> list[CategoryNode]:
    tree = await index.category_tree(aggregate_descendants=aggregate)
    return [_node(tree, root) for root in tree.roots]
