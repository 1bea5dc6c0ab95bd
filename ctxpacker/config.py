# ctxpacker/config.py

APP_NAME = "Context Packer"
APP_AUTHOR = "ctxpacker"

# Settings file name (per-user, lives in the platformdirs config dir)
SETTINGS_FILENAME = "settings.json"
GITIGNORE_FILENAME = ".gitignore"

# Part budget
DEFAULT_MAX_CHARS = 10000
FILE_HEADER_TEMPLATE = "// File: {path}"
PART_SEPARATOR = "\n\n"
PART_FILE_TEMPLATE = "{stem}_part{number:03d}.txt"

# Filtering
PROGRESS_REPORT_INTERVAL = 50             # nodes between progress reports
GITIGNORE_MODES = ("simple", "git")

# Structure export markers
PINNED_MARKER = " \U0001F4CC"
SELECTED_MARKER = " ✓"

# Whitelist used when no settings file exists yet
DEFAULT_ALLOWED_EXTENSIONS = (
    ".aab", ".ac", ".am", ".apk", ".asset", ".bat", ".bash", ".bib", ".blade.php",
    ".cjs", ".class", ".cmake", ".conf", ".cpp", ".cs", ".csproj", ".css", ".csv",
    ".cu", ".dart", ".dll", ".dmg", ".el", ".env", ".erb", ".exe", ".f90", ".f95",
    ".fs", ".gd", ".gemfile", ".gemspec", ".go", ".gradle", ".groovy", ".h", ".h5",
    ".hx", ".html", ".iml", ".in", ".ini", ".ipynb", ".jar", ".java", ".jenkinsfile",
    ".jl", ".js", ".json", ".jsx", ".kts", ".kt", ".lnk", ".lock", ".lua", ".m",
    ".mat", ".md", ".mdx", ".meta", ".mjs", ".mo", ".mod", ".mproj", ".nix", ".pde",
    ".php", ".pickle", ".pkg", ".plist", ".po", ".pom", ".pkr.hcl", ".pkl", ".pklx",
    ".pp", ".pyo", ".pyd", ".py", ".pyc", ".r", ".rake", ".rb", ".res", ".rs",
    ".sass", ".scala", ".sbv", ".sbt", ".scss", ".service", ".settings", ".sh",
    ".sln", ".spec.ts", ".storyboard", ".sum", ".sublime-project", ".sublime-workspace",
    ".swift", ".tif", ".toml", ".ts", ".tscn", ".tsx", ".tsv", ".twig", ".unity",
    ".uproject", ".vb", ".vimrc", ".war", ".workspace", ".xib", ".xml", ".xproj",
    ".xcworkspace", ".xcproject", ".yaml", ".yml", ".zsh",
)
