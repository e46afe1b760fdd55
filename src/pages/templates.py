"""HTML templates for post pages.

Pages are plain string templates filled with ``str.format``; every
value coming from the content store is escaped before it is inserted.
Styling uses Tailwind utility classes loaded from the CDN.
"""

from datetime import datetime

from src.content.images import ImageUrlBuilder, InvalidImageReferenceError
from src.posts.models import Comment, ImageRef, Post

from .portable_text import escape


# ==============================================================================
# Base Template
# ==============================================================================

BASE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
  <meta name="description" content="{description}">
  <script src="https://cdn.tailwindcss.com"></script>
</head>
<body>
  <main>
    {header}
    {content}
  </main>
</body>
</html>
"""

HEADER_TEMPLATE = """<header class="flex justify-between p-5 max-w-7xl mx-auto">
      <a href="/" class="text-3xl font-bold text-yellow-500">{site_title}</a>
    </header>"""


# ==============================================================================
# Post
# ==============================================================================

POST_TEMPLATE = """{main_image}
    <article class="max-w-3xl mx-auto p-5">
      <h1 class="text-4xl mt-10 mb-3">{title}</h1>
      <h2 class="text-xl font-light text-gray-500 mb-2">{description}</h2>

      <div class="flex items-center space-x-2">
        {author_image}
        <p class="font-light text-sm">Blog post by <span class="text-green-600">{author_name}</span> - Published at {published_at}</p>
      </div>
      <div class="mt-10">{body}</div>
    </article>
    <script>{local_time_script}</script>

    <hr class="max-w-lg my-5 mx-auto border border-yellow-500" />
    {comment_form}
    {comments}"""

PUBLISHED_AT_TEMPLATE = '<time datetime="{iso}" data-local-time>{text}</time>'

LOCAL_TIME_SCRIPT = """
document.querySelectorAll("time[data-local-time]").forEach(function (el) {
  el.textContent = new Date(el.dateTime).toLocaleString();
});
"""

COMMENT_FORM_TEMPLATE = """<div id="comment-thanks" class="hidden flex flex-col p-10 my-10 bg-yellow-500 text-white max-w-2xl mx-auto text-center md:text-left">
      <h3 class="text-3xl font-bold">Thank you for submitting your comment!</h3>
      <p>Once it has been approved, it will appear below!</p>
    </div>
    <form id="comment-form" action="{action}" method="post" novalidate class="flex flex-col p-5 max-w-2xl mx-auto mb-10">
      <h3 class="text-sm text-yellow-500">Enjoyed this article?</h3>
      <h4 class="text-3xl font-bold">Leave comment below!</h4>
      <hr class="py-3 mt-2" />

      <input name="_id" value="{post_id}" type="hidden" />

      <label class="block mb-5">
        <span class="text-gray-700">Name</span>
        <input name="name" required class="shadow border rounded py-2 px-3 form-input mt-1 block w-full outline-none focus:ring-1 focus:ring-yellow-500" placeholder="e.g Jane Doe" type="text" />
      </label>
      <label class="block mb-5">
        <span class="text-gray-700">Email</span>
        <input name="email" required class="shadow border rounded py-2 px-3 form-input mt-1 block w-full outline-none focus:ring-1 focus:ring-yellow-500" placeholder="e.g jane@example.com" type="email" />
      </label>
      <label class="block mb-5">
        <span class="text-gray-700">Comment</span>
        <textarea name="comment" required class="shadow border rounded py-2 px-3 form-textarea mt-1 block w-full outline-none focus:ring-1 focus:ring-yellow-500" placeholder="e.g What a great read!" rows="8"></textarea>
      </label>

      <div id="comment-errors" class="flex flex-col p-5 text-red-500"></div>

      <input class="shadow bg-yellow-500 hover:bg-yellow-400 focus:shadow-outline focus:outline-none text-white font-bold py-2 px-4 rounded cursor-pointer" type="submit" value="Submit" />
    </form>
    <script>{script}</script>"""

# Thank-you panel is shown only when the server confirms the write (2xx).
COMMENT_FORM_SCRIPT = """
(function () {
  var form = document.getElementById("comment-form");
  var errors = document.getElementById("comment-errors");
  var thanks = document.getElementById("comment-thanks");
  var required = ["name", "email", "comment"];

  function show(messages) {
    errors.innerHTML = "";
    messages.forEach(function (message) {
      var line = document.createElement("span");
      line.textContent = message;
      errors.appendChild(line);
    });
  }

  form.addEventListener("submit", function (event) {
    event.preventDefault();
    var data = {};
    new FormData(form).forEach(function (value, key) { data[key] = value; });

    var missing = required.filter(function (field) {
      return !String(data[field] || "").trim();
    });
    if (missing.length) {
      show(missing.map(function (field) {
        return "- The " + field + " field is required";
      }));
      return;
    }
    show([]);

    fetch(form.action, { method: "POST", body: JSON.stringify(data) })
      .then(function (response) {
        if (!response.ok) { throw new Error("HTTP " + response.status); }
        form.classList.add("hidden");
        thanks.classList.remove("hidden");
      })
      .catch(function () {
        show(["- Your comment could not be submitted, please try again"]);
      });
  });
})();
"""

COMMENTS_TEMPLATE = """<div class="flex flex-col p-10 my-10 mx-auto max-w-2xl shadow-yellow-500 shadow space-y-2 rounded">
      <h3 class="text-2xl">Comments</h3>
      <hr />
      {items}
    </div>"""

COMMENT_ITEM_TEMPLATE = """<div id="comment-{comment_id}">
        <p class="text-gray-600"><span class="text-yellow-500">{name} :</span> {comment}</p>
      </div>"""


# ==============================================================================
# Not found
# ==============================================================================

NOT_FOUND_TEMPLATE = """<div class="max-w-3xl mx-auto p-5 text-center">
      <h1 class="text-4xl mt-10 mb-3">404</h1>
      <p class="text-gray-500">This page could not be found.</p>
    </div>"""


def format_published_at(value: datetime) -> str:
    """Format a timestamp like ``10/19/2026, 03:04:05 PM``."""
    return value.strftime("%m/%d/%Y, %I:%M:%S %p")


def render_published_at(value: datetime | None) -> str:
    """``<time>`` element for the publish date, localized in the browser.

    The store's UTC value is the text until the page script rewrites it in
    the reader's timezone.
    """
    if value is None:
        return ""
    return PUBLISHED_AT_TEMPLATE.format(
        iso=escape(value.isoformat()), text=escape(format_published_at(value))
    )


def image_url(
    builder: ImageUrlBuilder | None, image: ImageRef | None, **options: int | str
) -> str | None:
    """Image URL, or None when there is no image or it cannot be resolved."""
    if builder is None or image is None:
        return None
    try:
        return builder.url(image, **options)
    except InvalidImageReferenceError:
        return None


def render_header(site_title: str) -> str:
    return HEADER_TEMPLATE.format(site_title=escape(site_title))


def render_document(site_title: str, title: str, content: str, description: str = "") -> str:
    """Wrap page content in the base document."""
    return BASE_TEMPLATE.format(
        title=escape(title),
        description=escape(description),
        header=render_header(site_title),
        content=content,
    )


def render_comment_form(post_id: str, action: str) -> str:
    return COMMENT_FORM_TEMPLATE.format(
        action=escape(action),
        post_id=escape(post_id),
        script=COMMENT_FORM_SCRIPT,
    )


def render_comments(comments: list[Comment]) -> str:
    """Render the approved comments list (emails are never shown)."""
    items = "".join(
        COMMENT_ITEM_TEMPLATE.format(
            comment_id=escape(comment.id),
            name=escape(comment.name),
            comment=escape(comment.comment),
        )
        for comment in comments
    )
    return COMMENTS_TEMPLATE.format(items=items)


def render_post_content(
    post: Post,
    body_html: str,
    *,
    image_builder: ImageUrlBuilder | None,
    comment_action: str,
) -> str:
    """Render the inner content of a post page."""
    main_image_src = image_url(image_builder, post.main_image)
    main_image = (
        f'<img class="w-full h-40 object-cover" src="{escape(main_image_src)}" alt="{escape(post.title)}" />'
        if main_image_src
        else ""
    )

    author_name = post.author.name if post.author else ""
    author_image_src = image_url(
        image_builder, post.author.image if post.author else None
    )
    author_image = (
        f'<img class="h-10 w-10 rounded-full object-cover" src="{escape(author_image_src)}" alt="{escape(author_name)}" />'
        if author_image_src
        else ""
    )

    return POST_TEMPLATE.format(
        main_image=main_image,
        title=escape(post.title),
        description=escape(post.description or ""),
        author_image=author_image,
        author_name=escape(author_name),
        published_at=render_published_at(post.created_at),
        body=body_html,
        local_time_script=LOCAL_TIME_SCRIPT,
        comment_form=render_comment_form(post.id, comment_action),
        comments=render_comments(post.comments),
    )


def render_not_found_content() -> str:
    return NOT_FOUND_TEMPLATE
