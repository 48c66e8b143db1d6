"""
Script to verify the class-notes assistant setup
"""
import os
import sys
from dotenv import load_dotenv

# Load environment
load_dotenv()

print("=" * 60)
print("CLASS NOTES ASSISTANT SETUP VERIFICATION")
print("=" * 60)

print(f"\n✓ Python version: {sys.version.split()[0]}")

# 1. Check required packages
print("\n📦 Checking Required Packages:")
required_packages = {
    'flask': 'flask',
    'flask-cors': 'flask_cors',
    'flask-limiter': 'flask_limiter',
    'python-dotenv': 'dotenv',
    'requests': 'requests',
    'openai': 'openai',
    'pypdf': 'pypdf',
    'python-docx': 'docx',
    'python-pptx': 'pptx',
}

missing = []
for pkg, module in required_packages.items():
    try:
        __import__(module)
        print(f"  ✓ {pkg}")
    except ImportError:
        print(f"  ✗ {pkg} - MISSING")
        missing.append(pkg)

if missing:
    print(f"\n⚠️  Missing packages: {', '.join(missing)}")
    print("Install with: pip install " + ' '.join(missing))
    sys.exit(1)

print("\n✓ All required packages installed")

from notes_rag.config import RAGConfig  # noqa: E402
from notes_rag.embeddings import EmbeddingClient  # noqa: E402
from notes_rag.errors import RAGError  # noqa: E402
from notes_rag.vector_store import QdrantGateway  # noqa: E402

# 2. Check configuration
print("\n🔧 Environment Configuration:")
config = RAGConfig.from_env()
api_key = config.openai_api_key
env_vars = {
    'OPENAI_API_KEY': '***' + api_key[-4:] if api_key else 'NOT SET',
    'LLM_PROVIDER': config.llm_provider,
    'QDRANT_URL': config.qdrant_url,
    'COLLECTION_NAME': config.collection_name,
    'EMBEDDING_MODEL': config.embedding_model,
    'DEFAULT_MODEL': config.default_model,
}
for key, value in env_vars.items():
    status = "✓" if value and value != "NOT SET" else "✗"
    print(f"  {status} {key}: {value}")

try:
    config.validate()
    print("  ✓ Configuration valid")
except ValueError as e:
    print(f"  ✗ Configuration invalid: {e}")

# 3. Qdrant
print("\n🗄️  Testing Qdrant:")
try:
    info = QdrantGateway(config).get_collection_info(config.collection_name)
    if info['exists']:
        print(f"  ✓ Collection '{config.collection_name}' has {info['points_count']} points")
    else:
        print(f"  ○ Collection '{config.collection_name}' (will be created on first ingestion)")
except RAGError as e:
    print(f"  ✗ Qdrant check failed: {e}")

# 4. Embeddings
print("\n🤖 Testing OpenAI embeddings:")
try:
    vector = EmbeddingClient(config).embed("warmup test")
    print(f"  ✓ Embedding generated ({len(vector)} dimensions)")
except RAGError as e:
    print(f"  ✗ Embedding test failed: {e}")

# 5. Documents folder
print("\n📁 Documents Folder:")
exists = os.path.isdir(config.documents_folder)
status = "✓" if exists else "✗"
print(f"  {status} {config.documents_folder} {'(exists)' if exists else '(missing)'}")

print("\n" + "=" * 60)
print("VERIFICATION COMPLETE")
print("=" * 60)
