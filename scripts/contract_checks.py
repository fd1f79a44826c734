import ast
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]


def load(rel):
    p = ROOT / rel
    txt = p.read_text(encoding='utf-8')
    return p, txt, ast.parse(txt)


def find_func(tree, name):
    for n in tree.body:
        if isinstance(n, (ast.FunctionDef, ast.AsyncFunctionDef)) and n.name == name:
            return n
    return None


def find_class(tree, name):
    for n in tree.body:
        if isinstance(n, ast.ClassDef) and n.name == name:
            return n
    return None


def methods(cls):
    return {n.name: n for n in cls.body if isinstance(n, (ast.FunctionDef, ast.AsyncFunctionDef))}


def args(fn):
    return [a.arg for a in fn.args.args] + [a.arg for a in fn.args.kwonlyargs]


# (module, class or None, callable, params every caller relies on)
CONTRACTS = [
    ('processing/signal_detector.py', 'SignalDetector', 'clean_keywords', ['signals']),
    ('processing/signal_detector.py', 'SignalDetector', 'process_signals', ['signals', 'now']),
    ('processing/signal_detector.py', 'SignalDetector', 'detect_anomalies', ['signals']),
    ('processing/signal_detector.py', 'SignalDetector', 'calculate_velocity', ['signals', 'keyword', 'window_days', 'now']),
    ('processing/signal_detector.py', 'SignalDetector', 'extract_top_keywords', ['signals', 'top_n']),
    ('processing/keyword_normalizer.py', None, 'normalize_keywords', ['keywords']),
    ('processing/keyword_normalizer.py', None, 'is_noisy_keyword', ['keyword']),
    ('intelligence/theme_classifier.py', None, 'identify_theme', ['keywords']),
    ('intelligence/narrative_clusterer.py', None, 'calculate_similarity', ['a', 'b']),
    ('intelligence/narrative_clusterer.py', 'NarrativeClusterer', 'cluster_signals', ['signals', 'now']),
    ('engine/pipeline.py', None, 'run_analysis', ['config', 'signals', 'now']),
    ('engine/pipeline.py', None, 'load_collection_files', ['data_dir']),
    ('engine/pipeline.py', None, 'save_analysis', ['result', 'output_path']),
]


def main() -> int:
    failures = []
    trees = {}

    for rel, cname, fname, required in CONTRACTS:
        if rel not in trees:
            trees[rel] = load(rel)[2]
        tree = trees[rel]
        if cname:
            cls = find_class(tree, cname)
            if not cls:
                failures.append(f'{cname} missing in {rel}')
                continue
            fn = methods(cls).get(fname)
        else:
            fn = find_func(tree, fname)
        label = f'{cname}.{fname}' if cname else fname
        if not fn:
            failures.append(f'{label} missing in {rel}')
            continue
        got = args(fn)
        for req in required:
            if req not in got:
                failures.append(f'{label} missing required param {req}')

    # the core must stay free of network/storage imports
    for rel in ['processing/signal_detector.py', 'processing/keyword_normalizer.py',
                'intelligence/narrative_clusterer.py', 'intelligence/theme_classifier.py']:
        _, _, tree = load(rel)
        for node in ast.walk(tree):
            names = []
            if isinstance(node, ast.Import):
                names = [a.name for a in node.names]
            elif isinstance(node, ast.ImportFrom) and node.module:
                names = [node.module]
            for name in names:
                if name.split('.')[0] in {'aiohttp', 'requests', 'sqlite3', 'socket'}:
                    failures.append(f'{rel} imports {name}; scoring/clustering must stay I/O free')

    # main.py must call the pipeline with supported kwargs
    _, _, main_tree = load('main.py')
    run_fn = find_func(trees['engine/pipeline.py'], 'run_analysis')
    run_args = args(run_fn) if run_fn else []
    for node in ast.walk(main_tree):
        if isinstance(node, ast.Call) and getattr(node.func, 'id', None) == 'run_analysis':
            for kw in node.keywords:
                if kw.arg and kw.arg not in run_args:
                    failures.append(f'main.py calls run_analysis with unsupported kwarg {kw.arg}')

    if failures:
        print('CONTRACT_CHECK_FAIL')
        for f in failures:
            print('-', f)
        return 1
    print('CONTRACT_CHECK_PASS')
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
