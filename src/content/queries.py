"""GROQ queries used by the post pages."""

# Every post's id and slug, used to enumerate renderable pages.
POST_PATHS_QUERY = """*[_type == "post"]{
  _id,
  slug {
    current
  }
}"""

# One post by slug, with its author resolved and only its approved comments.
POST_BY_SLUG_QUERY = """*[_type == "post" && slug.current == $slug][0]{
  _id,
  _createdAt,
  title,
  author -> {
    name,
    image,
  },
  'comments': *[
    _type == "comment" && post._ref == ^._id && approved == true
  ],
  description,
  mainImage,
  slug,
  body
}"""
